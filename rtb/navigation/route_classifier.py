"""Route classifier - maps a route snapshot to a sidebar section.

Matching follows the router's non-exact path matching:
    - case-insensitive
    - a pattern matches any path that starts with its segments
      ('/report' matches '/report/create' but not '/reportcreate')
    - ':name' segments match exactly one non-empty segment
    - trailing slashes are ignored

Report edit mode is detected three ways, any one is enough:
    /report/create?id=42    creation view with an id in the query
    /report/edit/42         edit by path
    /report/42/edit         alternate edit shape
"""

import logging
from typing import Dict, List, Optional

from . import paths
from .models import Classification, RouteState
from .registry import SECTIONS

logger = logging.getLogger('rtb.navigation.classifier')


def _segments(path: str) -> List[str]:
    return [s for s in (path or '').split('/') if s]


def match_path(pattern: str, pathname: str, end: bool = False) -> Optional[Dict[str, str]]:
    """Match pathname against pattern. Returns captured params, or None.

    With end=False the pattern only has to match a prefix of whole segments.
    """
    pattern_segments = _segments(pattern)
    path_segments = _segments(pathname)

    if len(path_segments) < len(pattern_segments):
        return None
    if end and len(path_segments) != len(pattern_segments):
        return None

    params = {}
    for expected, actual in zip(pattern_segments, path_segments):
        if expected.startswith(':'):
            params[expected[1:]] = actual
        elif expected.lower() != actual.lower():
            return None
    return params


class RouteClassifier:

    def __init__(self, sections=SECTIONS):
        self._sections = tuple(sections)

    def classify(self, route: RouteState) -> Classification:
        """Label a route with its section and edit-mode flag.

        Unrecognized paths yield section_id=None; nothing is raised.
        """
        section_id = None
        for section in self._sections:
            if any(match_path(p, route.pathname) is not None for p in section.route_patterns):
                section_id = section.id
                break

        if section_id is None:
            logger.debug(f'No section owns {route.pathname}')

        return Classification(
            route=route,
            section_id=section_id,
            is_edit_route=self.is_report_edit_route(route),
        )

    @staticmethod
    def is_report_edit_route(route: RouteState) -> bool:
        # Shapes overlap; any one of them marks edit mode
        by_query = (
            match_path(paths.REPORT_CREATE, route.pathname) is not None
            and bool(route.query_value('id'))
        )
        by_path = match_path(paths.REPORT_EDIT_BY_PATH, route.pathname) is not None
        by_alternate = match_path(paths.REPORT_EDIT_ALTERNATE, route.pathname) is not None
        return by_query or by_path or by_alternate


_default_classifier = RouteClassifier()


def classify(route: RouteState) -> Classification:
    """Classify with the registered sections."""
    return _default_classifier.classify(route)
