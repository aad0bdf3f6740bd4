"""
Run timestamp for merged output names.

Every part written by one merge run carries the same ``YYYYMMDD_HHMMSS``
stamp, taken from the local wall clock when the run starts. Tests pin it
with ``clock.frozen(dt)``; the pinned value lives in a ContextVar so runs
on other threads or tasks keep the real clock.
"""
import datetime
import contextlib
from typing import Optional, Generator
from contextvars import ContextVar

_pinned_time: ContextVar[Optional[datetime.datetime]] = ContextVar("pinned_time", default=None)

STAMP_FORMAT = "%Y%m%d_%H%M%S"


def now() -> datetime.datetime:
    pinned = _pinned_time.get()
    if pinned:
        return pinned
    return datetime.datetime.now()


def run_stamp(dt: Optional[datetime.datetime] = None) -> str:
    """Zero-padded stamp used in SmartMerger_<stamp>_part<N>.md."""
    return (dt or now()).strftime(STAMP_FORMAT)


@contextlib.contextmanager
def frozen(dt: datetime.datetime) -> Generator[None, None, None]:
    """Pin ``now()`` to ``dt`` inside the block; nesting restores the outer value."""
    token = _pinned_time.set(dt)
    try:
        yield
    finally:
        _pinned_time.reset(token)
