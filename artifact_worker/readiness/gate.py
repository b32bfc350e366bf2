"""Readiness probe that blocks worker start-up until the sidecars answer."""

from __future__ import annotations

import time
from typing import Callable

import httpx
from tenacity import RetryCallState, RetryError, Retrying, retry_if_exception_type, stop_after_attempt, wait_fixed

from artifact_worker.core.constants import MAX_ATTEMPTS, READY_DELAY_SECONDS, READYZ_PATH
from artifact_worker.core.environment import Environment
from artifact_worker.core.exceptions import EnvironmentNotReadyError


class ReadinessGate:
    """Poll ``<storage>/readyz`` with a fixed delay between failed probes.

    Any response counts as ready, whatever its status; only transport errors
    (connection refused, DNS, timeouts) count as failed probes.
    """

    def __init__(
        self,
        environment: Environment,
        client: httpx.Client,
        *,
        delay_seconds: float = READY_DELAY_SECONDS,
        timeout_seconds: float | None = None,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        self._env = environment
        self._client = client
        self._delay = max(float(delay_seconds), 0.0)
        self._timeout = timeout_seconds
        self._sleep = sleep

    @property
    def url(self) -> str:
        return self._env.storage_url + READYZ_PATH

    def wait_until_ready(self, max_attempts: int = MAX_ATTEMPTS) -> int:
        """Block until ready and return the number of probes issued.

        Local mode returns ``0`` without touching the network. Raises
        :class:`EnvironmentNotReadyError` once ``max_attempts`` probes failed.
        """
        if self._env.local_mode:
            self._env.logger.debug("local mode - skipping readiness check")
            return 0

        url = self.url
        retryer = Retrying(
            stop=stop_after_attempt(max(1, int(max_attempts))),
            wait=wait_fixed(self._delay),
            retry=retry_if_exception_type(httpx.TransportError),
            sleep=self._sleep,
            before_sleep=self._log_wait,
        )
        try:
            for attempt in retryer:
                with attempt:
                    self._probe(url, attempt.retry_state.attempt_number)
                    return attempt.retry_state.attempt_number
        except RetryError as exc:
            attempts = exc.last_attempt.attempt_number
            self._env.logger.error("environment not ready after %d attempt(s) - url: %s", attempts, url)
            raise EnvironmentNotReadyError(attempts, url) from exc.last_attempt.exception()
        return 0

    def _probe(self, url: str, attempt_number: int) -> None:
        self._env.logger.debug("checking 'ready' at '%s' - attempt #%d", url, attempt_number)
        response = self._client.get(url, timeout=self._timeout)
        self._env.logger.info("environment ready - url: %s status: %d", url, response.status_code)

    def _log_wait(self, retry_state: RetryCallState) -> None:
        outcome = retry_state.outcome
        error = outcome.exception() if outcome is not None else None
        delay = retry_state.next_action.sleep if retry_state.next_action is not None else self._delay
        self._env.logger.debug(
            "waiting for sidecars: attempt #%d delay: %d sec url: %s err: %s",
            retry_state.attempt_number,
            int(delay),
            self.url,
            error,
        )
