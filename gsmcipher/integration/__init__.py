# Integration Module
"""
Audit logging for cipher operations.

Events carry key fingerprints only and are hash-chained.
"""

# Lazy imports to avoid RuntimeWarning when running module directly
def __getattr__(name):
    """Lazy import of event logger names."""
    from . import event_logger
    return getattr(event_logger, name)

__all__ = [
    'EventType',
    'CipherEvent',
    'EventLogger',
    'create_event_logger',
]
