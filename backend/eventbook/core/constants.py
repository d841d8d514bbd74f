"""Application-wide constants for the EventBook platform."""

BRAND_NAME = "EventBook"

# Booking constraints
MIN_GUESTS = 1
MAX_SPECIAL_REQUIREMENTS_LENGTH = 2000
MAX_REASON_LENGTH = 500

# Service rating bounds
MIN_RATING = 0
MAX_RATING = 5

# How far ahead service detail pages show booked ranges
BOOKED_RANGE_WINDOW_DAYS = 30

# Dashboards
UPCOMING_BOOKINGS_LIMIT = 10
RECENT_BOOKINGS_LIMIT = 5
MONTHLY_STATS_MONTHS = 12

# Seconds in one day; the unit of the inclusive day count
SECONDS_PER_DAY = 86400
