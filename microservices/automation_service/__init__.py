"""
Automation Service

Property-marketing automation configurator providing:
- Per-trigger policy (campaign type, property source, condition categories)
- Condition guard and clause evaluation
- Action validation against the trigger policy
- Financing plan selection and creative image slot assignment
- Execution record state machine

Port: 8260
"""

__version__ = "1.0.0"
__service__ = "automation_service"
