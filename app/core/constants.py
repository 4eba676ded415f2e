"""Application constants."""

# Catalog defaults when an exercise leaves target parameters unset
DEFAULT_TARGET_SETS = 3
DEFAULT_TARGET_REPS = "8-12"
DEFAULT_REST_SECONDS = 90

# Session rating bounds (inclusive)
MIN_RATING = 1
MAX_RATING = 5

# History reads
DEFAULT_HISTORY_LIMIT = 20
DEFAULT_EXERCISE_HISTORY_LIMIT = 10
LAST_LIFTS_PER_EXERCISE = 3

# Debounced set writes (seconds)
SET_WRITE_DEBOUNCE_MIN_SECONDS = 0.5
SET_WRITE_DEBOUNCE_MAX_SECONDS = 0.8
