"""Automation - recurring background hooks

Components:
    reminders.py: Weekly review reminder hook (records intent only)
"""

from gtdbot.automation.reminders import WeeklyReminderScheduler

__all__ = ["WeeklyReminderScheduler"]
