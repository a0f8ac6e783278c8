"""Poll until condition becomes true.
"""

import logging
import time

__all__ = ['WaitTimeout', 'WaitCancelled', 'wait_for']

log = logging.getLogger(__name__)


class WaitTimeout(Exception):
    """Condition did not become true in time."""


class WaitCancelled(Exception):
    """Waiting was cancelled from outside."""


def wait_for(cond, interval=1.0, timeout=None, cancel=None, msg="waiting...",
             clock=time.monotonic, sleep=time.sleep):
    """Call cond() every interval seconds until it returns true.

    timeout of None or 0 means wait forever.  cancel is optional
    threading.Event, when set the wait is aborted.

    Returns seconds spent waiting.
    """
    start = clock()
    while True:
        if cancel is not None and cancel.is_set():
            raise WaitCancelled(msg)
        if cond():
            return clock() - start
        if timeout and clock() - start >= timeout:
            raise WaitTimeout("gave up after %ds: %s" % (timeout, msg))
        log.info(msg)
        sleep(interval)
