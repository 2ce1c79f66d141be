"""Named mutation intents queued off the request path.

Every ``emit`` hands back a future, so callers can either respond
optimistically or wait for the persistence outcome.
"""
from __future__ import annotations

import logging
import threading
from collections import defaultdict
from concurrent.futures import Future, ThreadPoolExecutor, wait
from typing import Any, Callable, Dict, List, Optional, Set, Tuple

from .mutator import RecordMutator

logger = logging.getLogger(__name__)

Handler = Callable[[Any], Any]


class DispatchError(RuntimeError):
    """Raised through an intent future when one or more handlers failed."""

    def __init__(self, intent: str, errors: List[BaseException]) -> None:
        detail = "; ".join(str(error) for error in errors)
        super().__init__(f"Intent '{intent}' failed: {detail}")
        self.intent = intent
        self.errors = errors


class IntentDispatcher:
    """Runs intent handlers FIFO on a single worker thread."""

    def __init__(self) -> None:
        self._handlers: Dict[str, List[Handler]] = defaultdict(list)
        self._executor = ThreadPoolExecutor(max_workers=1, thread_name_prefix="intent")
        self._pending: Set[Future] = set()
        self._lock = threading.Lock()

    def on(self, intent: str, handler: Handler) -> None:
        self._handlers[intent].append(handler)

    def handlers(self, intent: str) -> Tuple[Handler, ...]:
        return tuple(self._handlers.get(intent, ()))

    def emit(self, intent: str, payload: Any) -> Future:
        handlers = self.handlers(intent)
        if not handlers:
            done: Future = Future()
            done.set_result([])
            return done
        future = self._executor.submit(self._run, intent, handlers, payload)
        with self._lock:
            self._pending.add(future)
        future.add_done_callback(self._forget)
        return future

    def drain(self, timeout: Optional[float] = None) -> None:
        with self._lock:
            pending = set(self._pending)
        if pending:
            wait(pending, timeout=timeout)

    def shutdown(self, wait: bool = True) -> None:
        self._executor.shutdown(wait=wait)

    def _forget(self, future: Future) -> None:
        with self._lock:
            self._pending.discard(future)

    @staticmethod
    def _run(intent: str, handlers: Tuple[Handler, ...], payload: Any) -> List[Any]:
        results: List[Any] = []
        errors: List[BaseException] = []
        for handler in handlers:
            try:
                results.append(handler(payload))
            except Exception as exc:
                logger.exception("Error handling intent '%s'", intent)
                errors.append(exc)
        if errors:
            raise DispatchError(intent, errors)
        return results


def bind_mutator(dispatcher: IntentDispatcher, mutator: RecordMutator) -> IntentDispatcher:
    dispatcher.on("create", mutator.create)
    dispatcher.on("update", mutator.update)
    dispatcher.on("delete", mutator.delete)
    return dispatcher
