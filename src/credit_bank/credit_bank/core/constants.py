"""Defaults shared by services, controllers and settings."""

DEFAULT_SESSION_MINUTES = 30
DEFAULT_RECENT_SESSIONS = 10
DEFAULT_RECENT_RECORDS = 10
DEFAULT_TOKEN_TTL_HOURS = 12
MIN_PASSWORD_LENGTH = 6
SESSION_TOKEN_BYTES = 32

# Column widths in database/schema.sql
MAX_CLASS_ID_LENGTH = 64
MAX_NAME_LENGTH = 120
MAX_EMAIL_LENGTH = 255
MAX_TITLE_LENGTH = 200
MAX_SHORT_TEXT_LENGTH = 100
MAX_SKILLS_LENGTH = 500
MAX_TEXT_LENGTH = 5000
