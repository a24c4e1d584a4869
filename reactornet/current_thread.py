"""Per-thread cached kernel thread id."""

import threading

_cache = threading.local()


def tid() -> int:
    """Return the native id of the calling thread, cached per thread."""
    cached = getattr(_cache, "tid", 0)
    if cached == 0:
        cached = threading.get_native_id()
        _cache.tid = cached
    return cached