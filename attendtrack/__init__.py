"""
attendtrack – lecture attendance tracker with schedule reminders.
"""
