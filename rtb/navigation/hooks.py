"""Subscribers for sidebar side effects.

NavigationSession publishes one notification per applied effect, after the
event that caused it is fully reduced:

    OVERLAY_CLOSED     {'user_id', 'pathname'}          the notifications overlay must close
    FOCUS_CHANGED      {'user_id', 'focus'}             focused section id, or None
    SECTION_PERSISTED  {'user_id', 'storage_key', 'expanded'}

Usage:
    from navigation import hooks

    @hooks.on(hooks.OVERLAY_CLOSED)
    def close_popover(payload):
        ...
"""

import logging

logger = logging.getLogger('rtb.navigation.hooks')

OVERLAY_CLOSED = 'navigation.overlay_closed'
FOCUS_CHANGED = 'navigation.focus_changed'
SECTION_PERSISTED = 'navigation.section_persisted'

EVENTS = (OVERLAY_CLOSED, FOCUS_CHANGED, SECTION_PERSISTED)

_subscribers = {name: [] for name in EVENTS}


def _checked(event_type: str) -> list:
    try:
        return _subscribers[event_type]
    except KeyError:
        raise ValueError(f'Unknown navigation event {event_type!r}; expected one of {", ".join(EVENTS)}')


def on(event_type: str, callback=None):
    """Subscribe callback to event_type. Without a callback, returns a decorator."""
    subscribers = _checked(event_type)
    if callback is None:
        return lambda fn: on(event_type, fn)
    subscribers.append(callback)
    logger.debug(f'{getattr(callback, "__name__", callback)!s} subscribed to {event_type}')
    return callback


def off(event_type: str, callback) -> bool:
    """Unsubscribe callback. Returns False when it was not subscribed."""
    subscribers = _checked(event_type)
    if callback in subscribers:
        subscribers.remove(callback)
        return True
    return False


def fire(event_type: str, payload: dict) -> int:
    """Notify every subscriber of event_type. Returns how many ran without error.

    A failing subscriber is logged and skipped; navigation never fails because
    of a listener.
    """
    delivered = 0
    for callback in list(_checked(event_type)):
        try:
            callback(payload)
            delivered += 1
        except Exception:
            logger.exception(f'Subscriber {getattr(callback, "__name__", callback)!s} failed on {event_type}')
    return delivered


def clear(event_type: str = None):
    """Drop subscribers of one event type, or of all. Used in tests."""
    for name in ([event_type] if event_type else EVENTS):
        _checked(name).clear()
