"""Time helpers."""

from daydev_utils.date.clock import add_time, now_unix, utc_now

__all__ = ["add_time", "now_unix", "utc_now"]
