"""SyncEngine - reducer behind the collapsible sidebar.

reduce(state, event) -> SyncResult(state, sections, effects)

The engine owns no state and performs no I/O. Persistence, overlay closing
and focus notifications are returned as SideEffects for the composing root
(NavigationSession) to apply. It never raises on bad input: unknown sections
and unexpected events are logged and leave the state untouched.

Per section, on a route change:
    1. active, was active last time and open   -> same-section navigation, nothing moves
    2. active otherwise                         -> focus it, open it (persisted)
    3. not active                               -> close it (persisted), drop its focus
    4. collapse_when_single_child and <= 1 item -> rule 2 never opens it; focus only
The overlay closes once per event when the pathname (not the query) changed.
"""

import logging

from core.utils.logging_config import log_with_context

from .menu_items import get_sub_items
from .models import (
    Classification, MainLinkSelected, ManualToggle, NavigationState, OverlayToggled,
    PermissionsResolved, RouteChanged, SectionId, SectionState, SectionView,
    SideEffects, SubLinkSelected, SyncResult,
)
from .registry import SECTIONS
from .route_classifier import RouteClassifier
from .stabilizer import stabilize

logger = logging.getLogger('rtb.navigation.engine')


class SyncEngine:

    def __init__(self, sections=SECTIONS, classifier: RouteClassifier = None,
                 default_expanded: bool = False, log_transitions: bool = True):
        self._sections = tuple(sections)
        self._by_id = {section.id: section for section in self._sections}
        self._classifier = classifier or RouteClassifier(self._sections)
        self._default_expanded = default_expanded
        self._log_transitions = log_transitions

    # ════════════════════════════════════════════
    # Public API
    # ════════════════════════════════════════════

    def initial_state(self, store) -> NavigationState:
        """Seed every section from storage. Nothing is active or focused yet."""
        sections = {}
        for section in self._sections:
            expanded = store.get(section.storage_key, self._default_expanded)
            sections[section.id] = SectionState(expanded=expanded, stable_expanded=expanded)
        return NavigationState(sections=sections)

    def reduce(self, state: NavigationState, event) -> SyncResult:
        if isinstance(event, RouteChanged):
            result = self._on_route_changed(state, event)
        elif isinstance(event, PermissionsResolved):
            result = self._on_permissions_resolved(state, event)
        elif isinstance(event, ManualToggle):
            result = self._on_manual_toggle(state, event)
        elif isinstance(event, SubLinkSelected):
            result = self._on_sub_link_selected(state, event)
        elif isinstance(event, MainLinkSelected):
            result = self._on_main_link_selected(state)
        elif isinstance(event, OverlayToggled):
            result = self._result(state.evolve(overlay_open=not state.overlay_open))
        else:
            logger.warning(f'Ignoring unsupported event {type(event).__name__}')
            result = self._result(state)

        if self._log_transitions:
            log_with_context(
                logger, logging.DEBUG, f'Reduced {type(event).__name__}',
                focus=result.state.focus.value if result.state.focus else None,
                persist=dict(result.effects.persist),
                close_overlay=result.effects.close_overlay,
            )
        return result

    def render(self, state: NavigationState) -> dict:
        """Per-section render state for the UI layer."""
        classification = state.last_classification
        active_id = classification.section_id if classification else None
        views = {}
        for section in self._sections:
            section_state = state.sections[section.id]
            focused = state.focus == section.id
            views[section.id] = SectionView(
                expanded=section_state.expanded,
                stable_expanded=section_state.stable_expanded,
                focused=focused,
                highlighted=focused or active_id == section.id,
                renders_as_link=self._is_single_child(section, state.permissions, classification),
            )
        return views

    def sub_items(self, state: NavigationState) -> dict:
        return {
            section.id: get_sub_items(section.id, state.permissions, state.last_classification)
            for section in self._sections
        }

    # ════════════════════════════════════════════
    # Event handlers
    # ════════════════════════════════════════════

    def _on_route_changed(self, state, event):
        route = event.route
        classification = self._classifier.classify(route)
        focus = state.focus
        sections = {}
        persist = []

        for section in self._sections:
            prev = state.sections[section.id]
            is_active = classification.section_id == section.id
            expanded = prev.expanded

            if is_active:
                if self._is_single_child(section, state.permissions, classification):
                    # Renders as a plain link: highlight it, keep the group shut
                    focus = section.id
                    expanded = False
                elif prev.was_active_last_transition and prev.expanded:
                    pass
                else:
                    focus = section.id
                    expanded = True
            else:
                expanded = False
                if focus == section.id:
                    focus = None

            if expanded != prev.expanded:
                persist.append((section.storage_key, expanded))

            sections[section.id] = SectionState(
                expanded=expanded,
                stable_expanded=stabilize(
                    is_active, expanded,
                    prev.was_active_last_transition, prev.stable_expanded,
                ),
                was_active_last_transition=is_active,
            )

        previous_route = state.last_route
        close_overlay = previous_route is not None and previous_route.pathname != route.pathname

        new_state = state.evolve(
            sections=sections,
            focus=focus,
            last_route=route,
            last_classification=classification,
            overlay_open=state.overlay_open and not close_overlay,
        )
        return self._result(new_state, SideEffects(
            persist=tuple(persist),
            close_overlay=close_overlay,
            focus_changed=focus != state.focus,
        ))

    def _on_permissions_resolved(self, state, event):
        if state.permissions_resolved:
            logger.debug('Permissions already resolved for this session - ignoring')
            return self._result(state)

        permissions = event.permissions
        classification = state.last_classification
        new_state = state.evolve(permissions=permissions, permissions_resolved=True)
        if classification is None:
            return self._result(new_state)

        focus = state.focus
        sections = dict(state.sections)
        persist = []

        for section in self._sections:
            if not section.collapse_when_single_child:
                continue
            was_single = self._is_single_child(section, state.permissions, classification)
            now_single = self._is_single_child(section, permissions, classification)
            if was_single == now_single:
                continue

            prev = sections[section.id]
            is_active = classification.section_id == section.id

            if now_single:
                expanded = False
            elif is_active:
                # Became a real group while its route is showing: treat as entering it
                focus = section.id
                expanded = True
            else:
                continue

            if expanded != prev.expanded:
                persist.append((section.storage_key, expanded))
            sections[section.id] = SectionState(
                expanded=expanded,
                stable_expanded=expanded,
                was_active_last_transition=is_active,
            )

        new_state = new_state.evolve(sections=sections, focus=focus)
        return self._result(new_state, SideEffects(
            persist=tuple(persist),
            focus_changed=focus != state.focus,
        ))

    def _on_manual_toggle(self, state, event):
        section = self._lookup(event.section_id)
        if section is None:
            return self._result(state)

        prev = state.sections[section.id]
        expanded = not prev.expanded
        classification = state.last_classification
        is_active = classification is not None and classification.section_id == section.id

        sections = dict(state.sections)
        sections[section.id] = SectionState(
            expanded=expanded,
            stable_expanded=expanded,
            was_active_last_transition=is_active,
        )
        return self._result(
            state.evolve(sections=sections),
            SideEffects(persist=((section.storage_key, expanded),)),
        )

    def _on_sub_link_selected(self, state, event):
        section = self._lookup(event.section_id)
        if section is None:
            return self._result(state)

        return self._result(
            state.evolve(focus=section.id, overlay_open=False),
            SideEffects(close_overlay=True, focus_changed=state.focus != section.id),
        )

    def _on_main_link_selected(self, state):
        sections = {}
        persist = []
        for section in self._sections:
            prev = state.sections[section.id]
            if prev.expanded:
                persist.append((section.storage_key, False))
            sections[section.id] = prev.evolve(expanded=False, stable_expanded=False)

        return self._result(
            state.evolve(sections=sections, focus=None, overlay_open=False),
            SideEffects(
                persist=tuple(persist),
                close_overlay=True,
                focus_changed=state.focus is not None,
            ),
        )

    # ════════════════════════════════════════════
    # Internal
    # ════════════════════════════════════════════

    def _result(self, state, effects=None):
        return SyncResult(state=state, sections=self.render(state), effects=effects or SideEffects())

    def _lookup(self, section_id):
        try:
            return self._by_id[SectionId(section_id)]
        except (ValueError, KeyError):
            logger.warning(f'Ignoring event for unknown section {section_id!r}')
            return None

    @staticmethod
    def _is_single_child(section, permissions, classification: Classification = None) -> bool:
        if not section.collapse_when_single_child:
            return False
        return len(get_sub_items(section.id, permissions, classification)) <= 1
