"""Constants for competency and composite scoring."""

# Raw competency scores are clamped into this range
MIN_RAW_SCORE = 0.0
MAX_RAW_SCORE = 100.0

# Composite score precision (half-up)
FINAL_SCORE_DECIMALS = 2

# A comparison needs at least this many configurations
MIN_COMPARE_VERSIONS = 2
