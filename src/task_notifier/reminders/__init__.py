"""
Reminder subsystem.

Components:
- engine.py: should_fire, the stateless time-window check
- rules.py: lead times and message templates per item type
- clock.py: run clock with the fixed-offset local time
- messages.py: summary and sharing notice composition
- dispatcher.py: NotificationDispatcher orchestrating one run
"""
