"""
Section Registry - single source of truth for the collapsible sidebar groups
and the flat links around them.

Route domains of different sections must not overlap: every pattern's first
path segment is owned by exactly one section. validate_sections() enforces
this at import time so the classifier can never return an ambiguous result.
"""

import logging
from dataclasses import dataclass
from typing import Dict, Tuple

from . import paths
from .exceptions import SectionConfigurationError, UnknownSectionError
from .models import SectionId

logger = logging.getLogger('rtb.navigation.registry')


@dataclass(frozen=True)
class SectionDefinition:
    id: SectionId
    label: str
    landing_path: str
    storage_key: str
    route_patterns: Tuple[str, ...]
    collapse_when_single_child: bool = False


SECTIONS: Tuple[SectionDefinition, ...] = (
    SectionDefinition(
        id=SectionId.REPORT,
        label='Business Trip Reports',
        landing_path=paths.REPORT_LIST,
        storage_key='sidebarReportOpen',
        route_patterns=(
            paths.REPORT_LIST,
            paths.REPORT_CREATE,
            paths.REPORT_EDIT_BY_PATH,
            paths.REPORT_EDIT_ALTERNATE,
        ),
    ),
    SectionDefinition(
        id=SectionId.TBM,
        label='Safety Meetings (TBM)',
        landing_path=paths.TBM_LIST,
        storage_key='sidebarTbmOpen',
        route_patterns=(paths.TBM_LIST, paths.TBM_CREATE),
    ),
    SectionDefinition(
        id=SectionId.EXPENSE,
        label='Expenses',
        landing_path=paths.EXPENSE_PERSONAL,
        storage_key='sidebarExpenseOpen',
        route_patterns=(paths.EXPENSE_PERSONAL, paths.EXPENSE_TEAM),
        collapse_when_single_child=True,
    ),
)


# (key, label, path, visibility flag on PermissionContext or None)
MAIN_LINKS: Tuple[Tuple[str, str, str, str], ...] = (
    ('home', 'Home', paths.DASHBOARD, 'show_home_menu'),
    ('workload', 'Workload', paths.WORKLOAD, None),
    ('vacation', 'Vacation', paths.VACATION, 'show_vacation_menu'),
    ('members', 'Members', paths.MEMBERS, None),
    ('vehicles', 'Vehicles', paths.VEHICLES, None),
)


def _first_segment(pattern: str) -> str:
    segments = [s for s in pattern.split('/') if s]
    return segments[0].lower() if segments else ''


def validate_sections(sections=SECTIONS) -> Dict[str, SectionId]:
    """Check ids, storage keys and route domains for collisions.

    Returns the first-segment → section ownership map.
    Raises SectionConfigurationError on any collision.
    """
    seen_ids = set()
    seen_keys = set()
    owners: Dict[str, SectionId] = {}

    for section in sections:
        if section.id in seen_ids:
            raise SectionConfigurationError(f'Duplicate section id {section.id.value}')
        if section.storage_key in seen_keys:
            raise SectionConfigurationError(f'Duplicate storage key {section.storage_key}')
        seen_ids.add(section.id)
        seen_keys.add(section.storage_key)

        if not section.route_patterns:
            raise SectionConfigurationError(f'Section {section.id.value} has no route patterns')

        for pattern in section.route_patterns:
            segment = _first_segment(pattern)
            if not segment or segment.startswith(':'):
                raise SectionConfigurationError(
                    f'Pattern {pattern!r} of {section.id.value} has no literal first segment')
            owner = owners.get(segment)
            if owner is not None and owner != section.id:
                raise SectionConfigurationError(
                    f'Pattern {pattern!r} overlaps sections {owner.value} and {section.id.value}')
            owners[segment] = section.id

    for key, _label, path, _flag in MAIN_LINKS:
        if _first_segment(path) in owners:
            raise SectionConfigurationError(f'Main link {key} points into a section domain')

    logger.debug(f'Validated {len(sections)} sections over route domains {sorted(owners)}')
    return owners


_SECTIONS_BY_ID = {section.id: section for section in SECTIONS}


def get_section(section_id) -> SectionDefinition:
    """Look up a section by SectionId or its string value."""
    try:
        return _SECTIONS_BY_ID[SectionId(section_id)]
    except (ValueError, KeyError):
        raise UnknownSectionError(section_id)


def parse_section_id(value) -> SectionId:
    """Convert user input to a SectionId, raising UnknownSectionError."""
    return get_section(value).id


validate_sections()
