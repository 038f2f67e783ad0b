import logging
import time
from typing import Callable

from django.db import DatabaseError, connections

log = logging.getLogger(__name__)


class DatabaseUnavailable(RuntimeError):
    pass


def wait_for_database(alias: str = 'default', attempts: int = 5, delay: float = 5.0,
                      sleep: Callable[[float], None] = time.sleep) -> int:
    """Probe ``alias`` with ``SELECT 1`` until it answers.

    Retries up to ``attempts`` times with a fixed ``delay`` between tries
    and returns the attempt number that succeeded. Raises
    :class:`DatabaseUnavailable` once the attempts are used up.
    """
    attempts = max(1, attempts)
    last_error = None
    for attempt in range(1, attempts + 1):
        conn = connections[alias]
        try:
            with conn.cursor() as c:
                c.execute('SELECT 1')
                c.fetchone()
            return attempt
        except DatabaseError as e:
            last_error = e
            log.warning("database %r unavailable (attempt %d/%d): %s", alias, attempt, attempts, e)
            conn.close()
        if attempt < attempts:
            sleep(delay)
    raise DatabaseUnavailable(f"database {alias!r} unreachable after {attempts} attempts: {last_error}")
