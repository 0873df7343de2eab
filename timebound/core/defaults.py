"""Shared default constants for the timebound library."""

MS_PER_SECOND: int = 1_000
MS_PER_MINUTE: int = 60_000
MS_PER_HOUR: int = 3_600_000
MS_PER_DAY: int = 86_400_000

# Number of future boundaries a RollingScheduler keeps queued, per kind.
DEFAULT_DAY_DEPTH: int = 7
DEFAULT_HOUR_DEPTH: int = 24
DEFAULT_MINUTE_DEPTH: int = 60
DEFAULT_SECOND_DEPTH: int = 60

# Upper bound on any queue depth; a tick refill is O(depth).
MAX_QUEUE_DEPTH: int = 10_000

# With no explicit interval the poller ticks this many times per boundary
# period (10 seconds for minutes), capped at MAX_POLL_INTERVAL_MS.
DEFAULT_POLLS_PER_PERIOD: int = 6
MAX_POLL_INTERVAL_MS: int = 86_400_000  # 1 day
