"""Constants and defaults.

Note: Keep constants here to avoid magic numbers spread across code.
"""

QR_TOKEN_PREFIX = "event-checkin"
DEFAULT_QR_TTL_HOURS = 24

INVITATION_TTL_HOURS = 24
INVITATION_TOKEN_BYTES = 32
OTP_LENGTH = 6

DEFAULT_PAGE_SIZE = 10
MAX_PAGE_SIZE = 100
MAX_SEARCH_LENGTH = 100

BULK_INVITE_MAX_ITEMS = 50
