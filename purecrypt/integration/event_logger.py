"""
Event Logger Module

Structured logging for the security-relevant actions of the library.

Events go to the standard ``logging`` hierarchy under the ``purecrypt``
namespace and are kept in a bounded in-memory history so callers (and the
tests) can inspect what happened without parsing log output.

Recorded events:
- Key pair generation and prime search exhaustion
- Cipher initialisation (transformation and mode only)
- RSA padding rejection
- Permissive AES unpadding

Key material, plaintext and ciphertext never appear in an event.
"""

import json
import logging
import threading
import time
from collections import deque
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any, Callable, Deque, Dict, List, Optional


# ============================================================================
# Constants
# ============================================================================

LOGGER_NAME = "purecrypt"
DEFAULT_HISTORY_SIZE = 256
EVENT_VERSION = "1.0"


def get_logger(name: str) -> logging.Logger:
    """
    Get a logger that inherits from the root logger.

    The logger propagates to the root logger and only gets a WARNING level
    of its own when the host application has not configured logging yet.

    Args:
        name: Logger name (typically __name__)

    Returns:
        Logger instance
    """
    logger = logging.getLogger(name)
    logger.propagate = True

    root_logger = logging.getLogger()
    if not root_logger.handlers:
        logger.setLevel(logging.WARNING)

    return logger


# ============================================================================
# Event Types
# ============================================================================

class EventType(Enum):
    """Types of security events the library records."""

    # Key management
    KEYPAIR_GENERATED = "keypair_generated"
    KEYPAIR_RETRY = "keypair_retry"
    PRIME_SEARCH_EXHAUSTED = "prime_search_exhausted"

    # Cipher usage
    CIPHER_INIT = "cipher_init"
    RSA_PADDING_REJECTED = "rsa_padding_rejected"
    PADDING_IGNORED = "padding_ignored"


_LEVELS = {
    EventType.KEYPAIR_GENERATED: logging.INFO,
    EventType.KEYPAIR_RETRY: logging.DEBUG,
    EventType.PRIME_SEARCH_EXHAUSTED: logging.ERROR,
    EventType.CIPHER_INIT: logging.DEBUG,
    EventType.RSA_PADDING_REJECTED: logging.WARNING,
    EventType.PADDING_IGNORED: logging.WARNING,
}


# ============================================================================
# Event Structure
# ============================================================================

@dataclass
class SecurityEvent:
    """A single recorded event."""
    event_type: EventType
    timestamp: float
    details: Dict[str, Any] = field(default_factory=dict)

    def to_json(self) -> str:
        """Serialize the event to compact JSON."""
        return json.dumps({
            'version': EVENT_VERSION,
            'type': self.event_type.value,
            'time': self.timestamp,
            'details': self.details,
        }, separators=(',', ':'), sort_keys=True)

    @classmethod
    def from_json(cls, text: str) -> 'SecurityEvent':
        """Parse an event produced by to_json."""
        data = json.loads(text)
        return cls(
            event_type=EventType(data['type']),
            timestamp=data['time'],
            details=data.get('details', {}),
        )

    def __str__(self) -> str:
        dt = datetime.fromtimestamp(self.timestamp)
        return f"[{dt.strftime('%Y-%m-%d %H:%M:%S')}] {self.event_type.value} {self.details}"


# ============================================================================
# Event Logger
# ============================================================================

class EventLogger:
    """
    Records SecurityEvents to ``logging`` and a bounded history.

    Example:
        >>> events = EventLogger()
        >>> events.record(EventType.CIPHER_INIT, transformation="AES/CBC/PKCS5Padding")
        >>> events.history()[-1].event_type
        <EventType.CIPHER_INIT: 'cipher_init'>
    """

    def __init__(self, logger: Optional[logging.Logger] = None,
                 history_size: int = DEFAULT_HISTORY_SIZE):
        """
        Args:
            logger: Logger to write to (defaults to the "purecrypt.events" logger)
            history_size: Number of events kept in memory
        """
        self._logger = logger or get_logger(f"{LOGGER_NAME}.events")
        self._history: Deque[SecurityEvent] = deque(maxlen=history_size)
        self._callbacks: List[Callable[[SecurityEvent], None]] = []
        self._lock = threading.Lock()

    def record(self, event_type: EventType, **details: Any) -> SecurityEvent:
        """
        Record an event.

        Args:
            event_type: Kind of event
            **details: JSON-serialisable context (never key material)

        Returns:
            The recorded event
        """
        event = SecurityEvent(event_type=event_type, timestamp=time.time(), details=details)
        with self._lock:
            self._history.append(event)
            callbacks = list(self._callbacks)

        self._logger.log(_LEVELS[event_type], "%s", event.to_json())
        # Callbacks must not break the operation that recorded the event
        for callback in callbacks:
            try:
                callback(event)
            except Exception:
                self._logger.exception("Event callback %r failed for %s", callback, event_type.value)
        return event

    def add_callback(self, callback: Callable[[SecurityEvent], None]) -> None:
        """Add a callback notified of every new event."""
        with self._lock:
            self._callbacks.append(callback)

    def remove_callback(self, callback: Callable[[SecurityEvent], None]) -> None:
        """Remove a callback."""
        with self._lock:
            if callback in self._callbacks:
                self._callbacks.remove(callback)

    def history(self, event_type: Optional[EventType] = None) -> List[SecurityEvent]:
        """Return recorded events, optionally filtered by type."""
        with self._lock:
            events = list(self._history)
        if event_type is None:
            return events
        return [e for e in events if e.event_type == event_type]

    def clear(self) -> None:
        """Drop the in-memory history."""
        with self._lock:
            self._history.clear()


_default_logger: Optional[EventLogger] = None
_default_lock = threading.Lock()


def get_event_logger() -> EventLogger:
    """Return the process-wide EventLogger, creating it on first use."""
    global _default_logger
    with _default_lock:
        if _default_logger is None:
            _default_logger = EventLogger()
        return _default_logger


def record_event(event_type: EventType, **details: Any) -> SecurityEvent:
    """Record an event on the process-wide EventLogger."""
    return get_event_logger().record(event_type, **details)
