"""Centralized constants for the scheduling engine.

All magic numbers and configuration defaults live here so every layer
imports from a single source of truth.
"""

# ---------- Time ----------
SECS_PER_MINUTE = 60
SECS_PER_HOUR = 3600
SECS_PER_DAY = 86400

# ---------- Ease factor (stored x1000) ----------
EASE_FACTOR_AGAIN_DELTA = -0.20
EASE_FACTOR_HARD_DELTA = -0.15
EASE_FACTOR_EASY_DELTA = 0.15
MINIMUM_EASE_FACTOR = 1.30
DEFAULT_EASE_FACTOR = 2500

# ---------- Learning steps ----------
FAILED_REVIEW_DEFAULT_DELAY_SECS = 600
HARD_SINGLE_STEP_MULTIPLIER = 1.5

# ---------- FSRS ----------
FSRS_PARAM_COUNT = 19
FSRS_DIFFICULTY_MIN = 1.0
FSRS_DIFFICULTY_MAX = 10.0
FSRS_DEFAULT_DIFFICULTY = 5.0
RETRIEVABILITY_BASE = 0.9

# ---------- Queue Builder ----------
DEFAULT_LEARN_AHEAD_SECS = 1200
INTRADAY_LEARNING_WINDOW_SECS = SECS_PER_DAY

# ---------- FNV-1a (64 bit) ----------
FNV_OFFSET_BASIS = 0xCBF29CE484222325
FNV_PRIME = 0x100000001B3
U64_MASK = 0xFFFFFFFFFFFFFFFF
