"""
Retrying clone attempts against a single remote.

A remote that resets the connection during the SSH identification exchange
is usually throttling concurrent connections, so the same URL is tried
again after a short random sleep. Any other failure is final for the URL.
"""

import logging
import random
import re
import time
from dataclasses import dataclass
from pathlib import Path
from typing import Callable, Optional

from repobootstrap.acquisition.git_handler import GitHandler
from repobootstrap.core.config import RetryConfig
from repobootstrap.core.exceptions import (
    RemoteUnavailableError,
    RetryExhaustedError,
    TransientTransportError,
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CloneAttempt:
    """A successful clone of one URL."""

    url: str
    tries: int


class CloneRetryEngine:
    """Clones one URL, retrying while the failure looks transient."""

    def __init__(
        self,
        fetcher: GitHandler,
        config: RetryConfig,
        sleep: Callable[[float], None] = time.sleep,
        rng: Optional[random.Random] = None,
        clock: Callable[[], float] = time.monotonic,
    ):
        self.fetcher = fetcher
        self.config = config
        self._sleep = sleep
        self._rng = rng or random.Random()
        self._clock = clock
        self._transient = None
        if config.transient_patterns:
            self._transient = re.compile(
                "|".join(f"(?:{pattern})" for pattern in config.transient_patterns)
            )

    def is_transient(self, output: str) -> bool:
        """Whether captured git output shows a handshake reset by the server."""
        return bool(self._transient and self._transient.search(output or ""))

    def attempt(self, url: str, destination: Path) -> CloneAttempt:
        """
        Clone ``url`` into ``destination``.

        Args:
            url: Full repository URL.
            destination: Clone target directory.

        Returns:
            CloneAttempt describing the successful clone.

        Raises:
            RetryExhaustedError: Transient failures outlasted the retry budget.
            RemoteUnavailableError: The remote failed for any other reason.
        """
        started = self._clock()
        tries = 0
        while True:
            tries += 1
            try:
                self._try_once(url, destination)
            except TransientTransportError as e:
                if self._budget_spent(tries, started):
                    raise RetryExhaustedError(url, e.log, tries) from e
                delay = self._rng.uniform(0, self.config.max_jitter)
                logger.warning(
                    f"Too many concurrent connections to {url}. "
                    f"Retrying after {delay:.1f}s (attempt {tries})."
                )
                self._sleep(delay)
                continue
            return CloneAttempt(url=url, tries=tries)

    def _try_once(self, url: str, destination: Path) -> None:
        logger.debug(f"Trying to clone from {url}")
        result = self.fetcher.clone(url, destination)
        if result.ok:
            return

        self.fetcher.cleanup_clone(destination)
        if self.is_transient(result.output):
            raise TransientTransportError(url, result.output)
        raise RemoteUnavailableError(url, result.output)

    def _budget_spent(self, tries: int, started: float) -> bool:
        if tries > self.config.max_retries:
            return True
        if self.config.max_duration and self._clock() - started >= self.config.max_duration:
            return True
        return False
