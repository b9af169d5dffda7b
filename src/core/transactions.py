"""Transaction helpers.

``atomic_with_retry`` wraps a service call in ``transaction.atomic`` and
retries it when the database reports a transient fault (lost connection,
serialization failure, lock timeout). Domain errors are never retried.
"""
from __future__ import annotations

import functools
import logging
import time

from django.conf import settings
from django.db import OperationalError, close_old_connections, transaction

from core.exceptions import StorageUnavailable

logger = logging.getLogger("solarcrm")


def atomic_with_retry(func=None, *, attempts: int | None = None, backoff: float = 0.05):
    """Decorator: run *func* atomically, retrying storage faults.

    Retries only happen at the outermost transaction boundary; inside an
    enclosing ``atomic`` block the fault propagates to the caller that owns
    the transaction.
    """

    def decorator(fn):
        @functools.wraps(fn)
        def wrapper(*args, **kwargs):
            if transaction.get_connection().in_atomic_block:
                with transaction.atomic():
                    return fn(*args, **kwargs)

            max_attempts = attempts or getattr(settings, "STORAGE_RETRY_ATTEMPTS", 3)
            for attempt in range(1, max_attempts + 1):
                try:
                    with transaction.atomic():
                        return fn(*args, **kwargs)
                except OperationalError as exc:
                    logger.warning(
                        "storage fault in %s (attempt %s/%s): %s",
                        fn.__name__, attempt, max_attempts, exc,
                    )
                    if attempt == max_attempts:
                        raise StorageUnavailable(
                            f"Storage unavailable after {max_attempts} attempts."
                        ) from exc
                    close_old_connections()
                    time.sleep(backoff * attempt)

        return wrapper

    if func is not None:
        return decorator(func)
    return decorator
