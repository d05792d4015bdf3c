"""
Request limits shared by configuration and the service layer.
"""

DEFAULT_MAX_PARTICIPANTS = 50
MAX_WINDOW_DAYS = 30
SLOW_REQUEST_THRESHOLD_MS = 1000
