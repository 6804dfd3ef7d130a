# Integration Module
"""
Logging of security events raised by the cipher and key modules.
"""

# Lazy imports keep `python -m purecrypt.integration.event_logger` warning-free
def __getattr__(name):
    """Lazy import of the event logger API."""
    from . import event_logger
    return getattr(event_logger, name)

__all__ = [
    'EventType',
    'SecurityEvent',
    'EventLogger',
    'get_logger',
    'get_event_logger',
    'record_event',
]
