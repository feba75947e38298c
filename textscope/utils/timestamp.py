import datetime
import time


def timestamp_isoformat(timezone=datetime.UTC):
    return datetime.datetime.now(timezone).isoformat()


def epoch_time_ns() -> int:
    """Wall-clock time in nanoseconds, used for span start timestamps."""
    return time.time_ns()


def monotonic_time_ns() -> int:
    """Monotonic clock reading in nanoseconds, only meaningful as a difference."""
    return time.perf_counter_ns()


def ns_to_us(value_ns: int) -> int:
    return value_ns // 1_000


def ns_to_ms(value_ns: int) -> float:
    return value_ns / 1_000_000
