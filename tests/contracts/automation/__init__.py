"""Automation service test contracts"""
