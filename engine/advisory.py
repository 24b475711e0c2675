"""engine.advisory

Consultant side channel.

The engine emits events; the channel turns each DecisionResolved into a
background provider call and keeps the cosmetic consultant state (message,
thinking flag). Replies are tagged with the session/stage they were asked for
and dropped if a newer decision or a reset happened meanwhile.

Nothing here writes to GameState.
"""

from __future__ import annotations

import itertools
import logging
import threading
from concurrent.futures import Executor, Future, ThreadPoolExecutor
from dataclasses import dataclass
from typing import Any, Callable, Optional

from content.providers.base import AdvisoryProvider
from content.schemas import FALLBACK_ERROR

from .config import EngineConfig
from .stage_engine import DecisionResolved, EngineEvent, SessionReset, SessionStarted, StageEngine

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Ticket:
    session_id: int
    stage: int
    seq: int


class InlineExecutor(Executor):
    """Runs submitted calls immediately on the caller's thread."""

    def submit(self, fn: Callable[..., Any], /, *args: Any, **kwargs: Any) -> Future:
        fut: Future = Future()
        try:
            fut.set_result(fn(*args, **kwargs))
        except Exception as e:
            fut.set_exception(e)
        return fut


class AdvisoryChannel:
    def __init__(
        self,
        provider: AdvisoryProvider,
        *,
        executor: Optional[Executor] = None,
        config: EngineConfig = EngineConfig(),
        max_workers: int = 2,
    ) -> None:
        self.provider = provider
        self.config = config
        self._executor = executor or ThreadPoolExecutor(max_workers=max_workers, thread_name_prefix="consultant")
        self._lock = threading.Lock()
        self._seq = itertools.count(1)
        self._latest: Optional[Ticket] = None
        self._pending: Optional[Future] = None

        self.message: str = config.idle_message
        self.thinking: bool = False
        self.stale_dropped: int = 0

    @property
    def pending(self) -> Optional[Future]:
        with self._lock:
            return self._pending

    def attach(self, engine: StageEngine) -> "AdvisoryChannel":
        engine.subscribe(self.handle)
        return self

    def handle(self, event: EngineEvent) -> None:
        if isinstance(event, DecisionResolved):
            self.request(event)
        elif isinstance(event, SessionStarted):
            self._invalidate(self.config.greeting_message)
        elif isinstance(event, SessionReset):
            self._invalidate(self.config.idle_message)

    def request(self, event: DecisionResolved) -> Optional[Future]:
        """Submit the provider call. Returns None if it could not be scheduled."""
        ticket = Ticket(int(event.session_id), int(event.stage), next(self._seq))
        with self._lock:
            self._latest = ticket
            self.thinking = True

        try:
            fut = self._executor.submit(
                self.provider.request_feedback,
                int(event.stage),
                str(event.choice_label),
                str(event.result_label),
            )
        except Exception as e:
            logger.warning("Consultant call not scheduled (%s: %s)", type(e).__name__, e)
            with self._lock:
                if self._latest == ticket:
                    self.message = FALLBACK_ERROR
                    self.thinking = False
                    self._latest = None
                    self._pending = None
            return None

        with self._lock:
            if self._latest == ticket:
                self._pending = fut
        fut.add_done_callback(lambda f: self._deliver(ticket, f))
        return fut

    def _deliver(self, ticket: Ticket, fut: Future) -> None:
        if fut.cancelled():
            return
        exc = fut.exception()
        if exc is not None:
            logger.warning("Consultant provider raised %s: %s", type(exc).__name__, exc)
            text = FALLBACK_ERROR
        else:
            text = str(fut.result() or "") or FALLBACK_ERROR

        with self._lock:
            if ticket != self._latest:
                self.stale_dropped += 1
                logger.debug("Dropping stale consultant reply for %s (latest %s)", ticket, self._latest)
                return
            self.message = text
            self.thinking = False
            self._latest = None
            self._pending = None

    def _invalidate(self, message: str) -> None:
        with self._lock:
            pending = self._pending
            self._latest = None
            self._pending = None
            self.thinking = False
            self.message = message
        if pending is not None:
            pending.cancel()

    def shutdown(self, wait: bool = False) -> None:
        self._executor.shutdown(wait=wait)
