"""NavigationSession - composing root of the sidebar state.

Holds the current NavigationState, delivers events to the SyncEngine one at
a time, applies the returned side effects (storage writes, hooks) and
renders JSON snapshots for the UI layer.

Delivery is strictly serialized. An event is reduced and its storage writes
applied under the session lock; hook subscribers run afterwards, outside the
lock. An event dispatched by a subscriber waits in a backlog and is
delivered once every notification of the current event has gone out.

Sessions are kept per user in-process, bounded by NAV_MAX_SESSIONS (least
recently used first out). Dropping a session models a full page reload: the
next session is re-seeded from storage only.
"""

import logging
import threading
from collections import OrderedDict, deque

from flask_login import user_logged_out

from . import hooks
from .config import get_config
from .engine import SyncEngine
from .menu_items import get_main_links
from .models import (
    MainLinkSelected, ManualToggle, NavigationState, OverlayToggled,
    PermissionsResolved, RouteChanged, RouteState, SideEffects, SubLinkSelected,
)
from .toggle_store import MemoryBackend, PersistedToggleStore

logger = logging.getLogger('rtb.navigation.session')


class NavigationSession:

    def __init__(self, store: PersistedToggleStore, engine: SyncEngine = None, user_id=None):
        self.user_id = user_id
        self._store = store
        self._engine = engine or SyncEngine()
        self._lock = threading.Lock()
        # Per thread: set while that thread is delivering, holds events raised by subscribers
        self._delivery = threading.local()
        self._state = self._engine.initial_state(store)

    @property
    def state(self) -> NavigationState:
        return self._state

    @property
    def permissions_resolved(self) -> bool:
        return self._state.permissions_resolved

    def dispatch(self, event):
        """Reduce one event and apply its effects. Returns the SyncResult.

        Returns None when called from a hook subscriber: the event is queued
        and delivered after the one currently being applied.
        """
        outcome = self._dispatch(event)
        return outcome[0] if outcome else None

    def dispatch_with_snapshot(self, event):
        """Like dispatch(), returning (result, snapshot) of exactly that event's state."""
        return self._dispatch(event)

    # ============== Entry points ==============

    def route_changed(self, pathname: str, search: str = ''):
        return self.dispatch(RouteChanged(RouteState(pathname=pathname, search=search or '')))

    def resolve_permissions(self, permissions):
        return self.dispatch(PermissionsResolved(permissions))

    def manual_toggle(self, section_id):
        return self.dispatch(ManualToggle(section_id))

    def select_sub_link(self, section_id):
        return self.dispatch(SubLinkSelected(section_id))

    def select_main_link(self):
        return self.dispatch(MainLinkSelected())

    def toggle_overlay(self):
        return self.dispatch(OverlayToggled())

    # ============== Rendering ==============

    def snapshot(self, effects: SideEffects = None) -> dict:
        with self._lock:
            return self._render(self._state, effects)

    def _render(self, state: NavigationState, effects: SideEffects = None) -> dict:
        views = self._engine.render(state)
        sub_items = self._engine.sub_items(state)
        data = {
            'sections': {sid.value: view.to_dict() for sid, view in views.items()},
            'sub_items': {
                sid.value: [item.to_dict() for item in items]
                for sid, items in sub_items.items()
            },
            'main_links': [link.to_dict() for link in get_main_links(state.permissions)],
            'focus': state.focus.value if state.focus else None,
            'force_main_links_inactive': state.focus is not None,
            'overlay_open': state.overlay_open,
            'permissions': state.permissions.to_dict(),
            'permissions_resolved': state.permissions_resolved,
            'route': state.last_route.full_path if state.last_route else None,
        }
        if effects is not None:
            data['effects'] = effects.to_dict()
        return data

    # ============== Delivery ==============

    def _dispatch(self, event):
        backlog = getattr(self._delivery, 'backlog', None)
        if backlog is not None:
            backlog.append(event)
            logger.debug(f'{type(event).__name__} queued behind the event being applied')
            return None

        self._delivery.backlog = deque()
        try:
            outcome = self._deliver(event)
            while self._delivery.backlog:
                self._deliver(self._delivery.backlog.popleft())
            return outcome
        finally:
            self._delivery.backlog = None

    def _deliver(self, event):
        with self._lock:
            result = self._engine.reduce(self._state, event)
            self._state = result.state
            for key, expanded in result.effects.persist:
                self._store.set(key, expanded)
            snapshot = self._render(result.state, result.effects)

        self._notify(result)
        return result, snapshot

    def _notify(self, result):
        state, effects = result.state, result.effects
        for key, expanded in effects.persist:
            hooks.fire(hooks.SECTION_PERSISTED, {
                'user_id': self.user_id, 'storage_key': key, 'expanded': expanded,
            })
        if effects.close_overlay:
            hooks.fire(hooks.OVERLAY_CLOSED, {
                'user_id': self.user_id,
                'pathname': state.last_route.pathname if state.last_route else None,
            })
        if effects.focus_changed:
            hooks.fire(hooks.FOCUS_CHANGED, {
                'user_id': self.user_id,
                'focus': state.focus.value if state.focus else None,
            })


# ════════════════════════════════════════════
# Per-user session registry
# ════════════════════════════════════════════

_sessions: 'OrderedDict[str, NavigationSession]' = OrderedDict()
_memory_backends: 'OrderedDict[str, MemoryBackend]' = OrderedDict()
_sessions_lock = threading.Lock()


def _evict_oldest(registry: OrderedDict, limit: int, kind: str):
    while len(registry) > limit:
        user_id, _ = registry.popitem(last=False)
        logger.info(f'Evicted navigation {kind} of user {user_id} (limit {limit})')


def _build_store(user_id, config) -> PersistedToggleStore:
    if config.STORAGE_BACKEND == 'postgres':
        from .repositories import UserPreferenceBackend
        return PersistedToggleStore(UserPreferenceBackend(user_id))

    # Memory storage outlives sessions: a reload re-reads the same dict
    backend = _memory_backends.get(user_id)
    if backend is None:
        backend = _memory_backends[user_id] = MemoryBackend()
        _evict_oldest(_memory_backends, config.MAX_SESSIONS, 'memory storage')
    else:
        _memory_backends.move_to_end(user_id)
    return PersistedToggleStore(backend)


def get_session(user_id) -> NavigationSession:
    """Get or create the session of a user."""
    with _sessions_lock:
        session = _sessions.get(user_id)
        if session is not None:
            _sessions.move_to_end(user_id)
            return session

        config = get_config()
        engine = SyncEngine(
            default_expanded=config.DEFAULT_EXPANDED,
            log_transitions=config.LOG_TRANSITIONS,
        )
        session = NavigationSession(_build_store(user_id, config), engine, user_id=user_id)
        _sessions[user_id] = session
        _evict_oldest(_sessions, config.MAX_SESSIONS, 'session')
        logger.info(f'Navigation session created for user {user_id} ({config.STORAGE_BACKEND} storage)')
        return session


def drop_session(user_id) -> bool:
    """Forget a user's session; the next get_session() re-seeds from storage."""
    with _sessions_lock:
        return _sessions.pop(user_id, None) is not None


def reset_sessions():
    """Clear all sessions and in-memory storage. Used in tests."""
    with _sessions_lock:
        _sessions.clear()
        _memory_backends.clear()


@user_logged_out.connect
def _drop_on_logout(sender, user=None, **extra):
    if user is not None and drop_session(user.get_id()):
        logger.info(f'Navigation session dropped on logout of user {user.get_id()}')
