"""
Sidebar Navigation Data Models

Immutable value types passed between the classifier, the menu provider and
the sync engine. Every reduction produces new instances; nothing here is
mutated in place.
"""

from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Dict, Optional, Tuple
from urllib.parse import parse_qs


class SectionId(str, Enum):
    """Collapsible sidebar groups."""
    REPORT = "report"
    TBM = "tbm"
    EXPENSE = "expense"


CEO_POSITIONS = ('대표', 'CEO')


@dataclass(frozen=True)
class RouteState:
    """Snapshot of the router location for one navigation event."""
    pathname: str
    search: str = ''

    @property
    def query(self) -> Dict[str, list]:
        return parse_qs(self.search.lstrip('?'), keep_blank_values=True)

    def query_value(self, name: str) -> str:
        """First value of a query parameter, '' when absent."""
        values = self.query.get(name) or ['']
        return values[0]

    @property
    def full_path(self) -> str:
        if not self.search:
            return self.pathname
        search = self.search if self.search.startswith('?') else f'?{self.search}'
        return f'{self.pathname}{search}'


@dataclass(frozen=True)
class PermissionContext:
    """Role flags of the signed-in user. All False until the profile resolves."""
    is_ceo: bool = False
    is_admin: bool = False
    is_staff: bool = False

    @property
    def show_home_menu(self) -> bool:
        return self.is_ceo or self.is_admin

    @property
    def show_vacation_menu(self) -> bool:
        return self.is_ceo or not self.is_staff

    @classmethod
    def from_profile(cls, position: Optional[str], role: Optional[str]) -> 'PermissionContext':
        """Derive flags from a profile row. The CEO position grants everything."""
        role = (role or '').strip().lower()
        return cls(
            is_ceo=(position or '').strip() in CEO_POSITIONS,
            is_admin=role == 'admin',
            is_staff=role == 'staff',
        )

    def to_dict(self) -> dict:
        return {
            'is_ceo': self.is_ceo,
            'is_admin': self.is_admin,
            'is_staff': self.is_staff,
            'show_home_menu': self.show_home_menu,
            'show_vacation_menu': self.show_vacation_menu,
        }


@dataclass(frozen=True)
class Classification:
    """Result of classifying a route. section_id is None for unrecognized paths."""
    route: RouteState
    section_id: Optional[SectionId] = None
    is_edit_route: bool = False


@dataclass(frozen=True)
class SubMenuItem:
    """One link inside a section's disclosure group."""
    label: str
    target_path: str

    def to_dict(self) -> dict:
        return {'label': self.label, 'target_path': self.target_path}


@dataclass(frozen=True)
class MainLink:
    """A flat sidebar link outside any section."""
    key: str
    label: str
    target_path: str

    def to_dict(self) -> dict:
        return {'key': self.key, 'label': self.label, 'target_path': self.target_path}


@dataclass(frozen=True)
class SectionState:
    """Per-section state carried from one reduction to the next."""
    expanded: bool = False
    stable_expanded: bool = False
    was_active_last_transition: bool = False

    def evolve(self, **changes) -> 'SectionState':
        return replace(self, **changes)


@dataclass(frozen=True)
class NavigationState:
    """Full sidebar state owned by the composing root."""
    sections: Dict[SectionId, SectionState]
    focus: Optional[SectionId] = None
    permissions: PermissionContext = field(default_factory=PermissionContext)
    permissions_resolved: bool = False
    last_route: Optional[RouteState] = None
    last_classification: Optional[Classification] = None
    overlay_open: bool = False

    def evolve(self, **changes) -> 'NavigationState':
        return replace(self, **changes)


@dataclass(frozen=True)
class SectionView:
    """Render state handed to the UI layer for one section."""
    expanded: bool
    stable_expanded: bool
    focused: bool
    highlighted: bool
    renders_as_link: bool

    def to_dict(self) -> dict:
        return {
            'expanded': self.expanded,
            'stable_expanded': self.stable_expanded,
            'focused': self.focused,
            'highlighted': self.highlighted,
            'renders_as_link': self.renders_as_link,
        }


# ════════════════════════════════════════════
# Events
# ════════════════════════════════════════════

@dataclass(frozen=True)
class RouteChanged:
    route: RouteState


@dataclass(frozen=True)
class PermissionsResolved:
    permissions: PermissionContext


@dataclass(frozen=True)
class ManualToggle:
    section_id: SectionId


@dataclass(frozen=True)
class SubLinkSelected:
    section_id: SectionId


@dataclass(frozen=True)
class MainLinkSelected:
    pass


@dataclass(frozen=True)
class OverlayToggled:
    pass


# ════════════════════════════════════════════
# Reduction output
# ════════════════════════════════════════════

@dataclass(frozen=True)
class SideEffects:
    """Effects a reduction asks the composing root to perform.

    persist holds (storage_key, expanded) pairs in section order.
    """
    persist: Tuple[Tuple[str, bool], ...] = ()
    close_overlay: bool = False
    focus_changed: bool = False

    def to_dict(self) -> dict:
        return {
            'persist': dict(self.persist),
            'close_overlay': self.close_overlay,
            'focus_changed': self.focus_changed,
        }


@dataclass(frozen=True)
class SyncResult:
    state: NavigationState
    sections: Dict[SectionId, SectionView]
    effects: SideEffects
