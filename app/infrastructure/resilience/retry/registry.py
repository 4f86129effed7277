"""Topic handler registry for the retry scheduler."""

import threading
from typing import Any, Callable, Dict, Iterable, List, Optional

from infrastructure.logging import get_module_logger

logger = get_module_logger()

RetryHandler = Callable[[Any, str], None]
"""Handler signature: ``handler(payload, shop)``. Raising means failure."""


class HandlerRegistrationError(ValueError):
    """Raised when a handler registration is rejected."""


class HandlerRegistry:
    """Maps webhook topics to redelivery handlers.

    Args:
        known_topics: Optional closed set of topics. When given, handlers for
            any other topic are rejected.
    """

    def __init__(self, known_topics: Optional[Iterable[str]] = None) -> None:
        self._handlers: Dict[str, RetryHandler] = {}
        self._known_topics = (
            frozenset(known_topics) if known_topics is not None else None
        )
        self._lock = threading.Lock()

    def register(self, topic: str, handler: RetryHandler) -> None:
        """Register the handler for ``topic``.

        Raises:
            HandlerRegistrationError: For empty or unknown topics, non-callable
                handlers, or a topic that already has a handler
        """
        if not topic or not topic.strip():
            raise HandlerRegistrationError("topic must be a non-empty string")
        if not callable(handler):
            raise HandlerRegistrationError(f"handler for {topic} is not callable")
        if self._known_topics is not None and topic not in self._known_topics:
            raise HandlerRegistrationError(f"unknown topic: {topic}")

        with self._lock:
            if topic in self._handlers:
                raise HandlerRegistrationError(
                    f"a handler is already registered for {topic}"
                )
            self._handlers[topic] = handler

        logger.info(
            "retry_handler_registered",
            topic=topic,
            handler=getattr(handler, "__name__", repr(handler)),
        )

    def get(self, topic: str) -> Optional[RetryHandler]:
        with self._lock:
            return self._handlers.get(topic)

    def topics(self) -> List[str]:
        with self._lock:
            return sorted(self._handlers)

    def __contains__(self, topic: object) -> bool:
        with self._lock:
            return topic in self._handlers
