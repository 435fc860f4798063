"""Bounded waiting for eventually-consistent metadata.

After a write completes, the remote namespace may keep reporting a stale
length for the new file for a short while. `await_visible` polls until the
expected length shows up, giving up after a fixed number of attempts.
"""

from __future__ import annotations

import logging
import time
from collections.abc import Callable

from lakeblocks.interfaces.namespace import RemoteNamespace, RemoteNotFound

logger = logging.getLogger(__name__)

DEFAULT_ATTEMPTS = 5
DEFAULT_INTERVAL = 0.2  # seconds


def await_visible(  # pylint: disable=too-many-arguments
    namespace: RemoteNamespace,
    path: str,
    expected_size: int,
    *,
    attempts: int = DEFAULT_ATTEMPTS,
    interval: float = DEFAULT_INTERVAL,
    sleep: Callable[[float], None] = time.sleep,
) -> bool:
    """Poll ``path`` until its reported length equals ``expected_size``.

    A not-found answer counts as "not visible yet"; other remote errors
    propagate.

    Args:
        namespace: Namespace to poll.
        path: File to watch.
        expected_size: Length the file is known to have.
        attempts: Maximum number of metadata lookups.
        interval: Seconds to wait between lookups.
        sleep: Sleep function, replaceable in tests.

    Returns:
        bool: True once the size was observed, False if attempts ran out.
        Running out is logged, not raised: the write itself already succeeded.
    """
    for attempt in range(1, attempts + 1):
        try:
            length = namespace.get_entry(path).length
        except RemoteNotFound:
            length = None
        if length == expected_size:
            return True
        logger.debug(
            "Waiting for %s to report %d bytes (saw %s, attempt %d/%d)",
            path,
            expected_size,
            length,
            attempt,
            attempts,
        )
        if attempt < attempts:
            sleep(interval)

    logger.warning(
        "Timed out waiting for eventual consistency of %s (expected %d bytes)",
        path,
        expected_size,
    )
    return False
