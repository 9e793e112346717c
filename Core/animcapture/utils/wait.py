from __future__ import annotations

import time


def wait_until(predicate, timeout: float, interval: float = 0.2, sleep=time.sleep):
    """Polls a predicate until it returns a truthy value or the timeout elapses."""

    deadline = time.monotonic() + timeout
    while time.monotonic() < deadline:
        result = predicate()
        if result:
            return result
        sleep(interval)
    return predicate()
