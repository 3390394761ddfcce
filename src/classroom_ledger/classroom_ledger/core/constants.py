"""Constants and defaults.

Note: Keep constants here to avoid magic numbers spread across code.
"""

STUDENTS_COLLECTION = "students"
ATTENDANCE_COLLECTION = "attendance"
QUIZZES_COLLECTION = "quizzes"
POINT_TOTALS_COLLECTION = "quiz_points"

FIRST_PLACE_POINTS = 100
SECOND_PLACE_POINTS = 50
THIRD_PLACE_POINTS = 25

PRESENT_POINTS = 100
LATE_POINTS = 50

DEFAULT_MAX_BATCH_WRITES = 500
DEFAULT_TRANSACTION_ATTEMPTS = 5

MAX_MOBILE_LENGTH = 15
MIN_TEAMS = 2
MAX_TEAMS = 10
DEFAULT_SEED_COUNT = 100
