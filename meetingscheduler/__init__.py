"""
meetingscheduler - find the earliest conflict-free meeting slot for a group of participants.
"""

__version__ = "0.1.0"
