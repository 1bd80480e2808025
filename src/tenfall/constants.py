TARGET_SUM = 10
SUPPORTED_GRID_SIZES = (5, 6)
SUPPORTED_MAX_VALUES = (5, 6)

# Value returned by weighted spawning when the roll is not covered by the table.
DEFAULT_SPAWN_INDEX = 2

DEFAULT_DIFFICULTY = "normal"

# Session pacing (seconds)
SESSION_DURATION = 120.0
UNSOLVABLE_RESET_DELAY = 1.0
HINT_DELAY = 10.0
HINT_REPEAT_INTERVAL = 3.0
WIN_GRACE_PERIOD = 0.5

# Scoring
BASE_SCORE = 10
WIN_SCORE = 200
STARTING_MULTIPLIER = 1.25
MULTIPLIER_DURATION = 10.0
MULTIPLIER_DRAIN_RATE = 1.0
MULTIPLIER_INCREMENT = 0.25
STREAK_TIMEOUT = 5.0

# Fixed-step host loop used by the headless runner.
TICK_DT = 1 / 60
