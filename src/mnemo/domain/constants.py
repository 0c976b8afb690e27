"""Centralized constants for mnemo.

All magic numbers and configuration defaults live here so every layer
imports from a single source of truth.
"""

# ---------- SM-2 ----------
INITIAL_EASE_FACTOR = 2.5
MIN_EASE_FACTOR = 1.3
PASSING_QUALITY = 3
MIN_QUALITY = 0
MAX_QUALITY = 5
FIRST_INTERVAL_DAYS = 1
SECOND_INTERVAL_DAYS = 6
LAPSE_INTERVAL_DAYS = 1

# ---------- Skip ----------
SKIP_DELAY_DAYS = 1

# ---------- Sessions ----------
DEFAULT_CARD_LIMIT = 20
SECONDS_PER_CARD_ESTIMATE = 30

# ---------- Time ----------
SECONDS_PER_DAY = 86400
