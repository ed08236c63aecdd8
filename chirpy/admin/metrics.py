"""Hit counting and admin reset."""

from __future__ import annotations

import logging
from threading import Lock

from chirpy.core.exceptions import Forbidden
from chirpy.storage.base import ChirpyRepository

LOGGER = logging.getLogger(__name__)

METRICS_TEMPLATE = """<html>
  <body>
    <h1>Welcome, Chirpy Admin</h1>
    <p>Chirpy has been visited {hits} times!</p>
  </body>
</html>"""


class HitCounter:
    """Thread-safe request counter."""

    def __init__(self) -> None:
        self._lock = Lock()
        self._value = 0

    @property
    def value(self) -> int:
        with self._lock:
            return self._value

    def increment(self) -> int:
        with self._lock:
            self._value += 1
            return self._value

    def reset(self) -> None:
        with self._lock:
            self._value = 0


class AdminService:
    """Metrics page rendering and dev-only state reset."""

    def __init__(self, repo: ChirpyRepository, counter: HitCounter, *, is_dev: bool) -> None:
        self._repo = repo
        self._counter = counter
        self._is_dev = is_dev

    def render_metrics(self) -> str:
        """Return the admin metrics HTML page."""
        return METRICS_TEMPLATE.format(hits=self._counter.value)

    def reset(self) -> None:
        """Delete all stored state and zero the counter."""
        if not self._is_dev:
            raise Forbidden("Reset is only allowed on the dev platform")
        self._repo.reset()
        self._counter.reset()
        LOGGER.warning("state_reset")
