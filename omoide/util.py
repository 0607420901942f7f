"""Shared constants for omoide."""

from datetime import datetime, timedelta, timezone

# Length of a generated anniversary event, in seconds
HOUR = 3600

# Every generated timed event is pinned to Japan Standard Time
JST_OFFSET = "+09:00"
JST = timezone(timedelta(hours=9), "JST")
TOKYO = "Asia/Tokyo"

# Pause between successive writes to stay under the store's burst limit
RATE_LIMIT_DELAY = 0.1

# Bulk deletion lists "everything" between these bounds
DISTANT_PAST = datetime(1900, 1, 1, tzinfo=timezone.utc)
DISTANT_FUTURE = datetime(2200, 1, 1, tzinfo=timezone.utc)

BIWEEKLY_STEP_DAYS = 14
