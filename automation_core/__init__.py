"""Automation core: workflow graphs and recurring schedules."""

__version__ = "0.1.0"
