"""Quiz-related constants shared across the core layers."""

PASSING_PERCENTAGE: int = 70
MEGA_REWARD_MIN_CORRECT: int = 60
DEFAULT_CACHE_TTL_SECONDS: int = 5 * 60

MIN_ASSIGNMENT_NUMBER: int = 1
MAX_ASSIGNMENT_NUMBER: int = 7
MAX_OPTIONS_PER_QUESTION: int = 10
OPTION_LETTERS: tuple[str, ...] = ("A", "B", "C", "D", "E", "F", "G", "H", "I", "J")

MEGA_TEST_ASSIGNMENT_ID: str = "mega"
