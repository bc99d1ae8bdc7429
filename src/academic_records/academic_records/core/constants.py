"""Constants and defaults.

Note: Keep constants here to avoid magic numbers spread across code.
"""

MIN_PASSWORD_LENGTH = 6
DEFAULT_TOKEN_MINUTES = 24 * 60
DEFAULT_JWT_ALGORITHM = "HS256"
DEFAULT_STUDENT_PASSWORD = "student123"

NO_GRADE = "N/A"

# marks columns are DECIMAL(8, 2)
MAX_MARKS_LIMIT = 100000
