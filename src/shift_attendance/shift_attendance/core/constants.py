"""Constants and defaults.

Note: Keep matching thresholds here to avoid magic numbers spread across the engine.
"""

DEFAULT_UTC_OFFSET = "+05:30"

# Proximity matcher
DEFAULT_TOLERANCE_HOURS = 3
PREFERRED_MAX_DIFFERENCE_MINUTES = 35
OVERNIGHT_START_HOUR = 20
NOON_MINUTES = 12 * 60
MINUTES_PER_DAY = 24 * 60

# Disambiguation
AMBIGUITY_BAND_MINUTES = 30
ROSTER_FAST_PATH_MINUTES = 90
IN_TIME_WEIGHT = 0.6
OUT_TIME_WEIGHT = 0.4
ROSTER_SCORE_MULTIPLIER = 0.3
CLEAR_OUT_FIT_MINUTES = 30
TIGHT_SCORE_THRESHOLD = 15
DEFAULT_SCORE_THRESHOLD = 30

# Late / early
DEFAULT_GRACE_MINUTES = 15
OVERNIGHT_LATE_WINDOW_HOURS = 16

# Segmenter
MAX_SEGMENTS_PER_DAY = 3
OUT_SEARCH_WINDOW_HOURS = 24
LONG_PUNCH_SPLIT_HOURS = 14
SPLIT_START_TOLERANCE_MINUTES = 60
UNASSIGNED_BLOCK_HOURS = 1
SHORT_OUT_MINUTES = 60
DOUBLE_TAP_WINDOW_MINUTES = 5
DEFAULT_EXPECTED_HOURS = 8
PRESENT_RATIO = 0.9
HALF_DAY_RATIO = 0.45
MAX_SANE_EXTRA_HOURS = 16
HALF_DAY_OD_HOURS = 4.5
FULL_DAY_OD_HOURS = 9

# Aggregator
PRESENT_PAYABLE_THRESHOLD = 0.95
HALF_DAY_PAYABLE_THRESHOLD = 0.45

# Duration values above this are treated as minutes at ingestion
DURATION_MINUTES_CUTOFF = 20
