"""Sidebar menu contents.

Pure functions of (section, permissions, classification): no caching, no
side effects. The expense list length drives the single-child override in
the sync engine.
"""

from typing import List

from . import paths
from .models import Classification, MainLink, PermissionContext, SectionId, SubMenuItem
from .registry import MAIN_LINKS


def _report_items(classification: Classification) -> List[SubMenuItem]:
    create = SubMenuItem('New Trip Report', paths.REPORT_CREATE)
    if classification is not None and classification.is_edit_route:
        # Literal path + query of the draft being edited
        create = SubMenuItem('Edit Trip Report', classification.route.full_path)
    return [
        SubMenuItem('Trip Report List', paths.REPORT_LIST),
        create,
    ]


def _tbm_items() -> List[SubMenuItem]:
    return [
        SubMenuItem('TBM List', paths.TBM_LIST),
        SubMenuItem('New TBM', paths.TBM_CREATE),
    ]


def _expense_items(permissions: PermissionContext) -> List[SubMenuItem]:
    if permissions.is_ceo or permissions.is_admin:
        return [
            SubMenuItem('Personal Expenses', paths.EXPENSE_PERSONAL),
            SubMenuItem('Team Expenses', paths.EXPENSE_TEAM),
        ]
    if permissions.is_staff:
        return [SubMenuItem('Personal Expenses', paths.EXPENSE_PERSONAL)]
    return []


def get_sub_items(section_id: SectionId, permissions: PermissionContext,
                  classification: Classification = None) -> List[SubMenuItem]:
    """Ordered sub-items of a section for the given permissions and route."""
    section_id = SectionId(section_id)
    if section_id == SectionId.REPORT:
        return _report_items(classification)
    if section_id == SectionId.TBM:
        return _tbm_items()
    if section_id == SectionId.EXPENSE:
        return _expense_items(permissions)
    return []


def get_main_links(permissions: PermissionContext) -> List[MainLink]:
    """Flat links visible to the user, in sidebar order."""
    links = []
    for key, label, target_path, flag in MAIN_LINKS:
        if flag is not None and not getattr(permissions, flag):
            continue
        links.append(MainLink(key, label, target_path))
    return links
