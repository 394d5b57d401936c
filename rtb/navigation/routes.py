"""API routes for the sidebar navigation state."""

import logging
from flask import jsonify
from flask_login import current_user

from . import navigation_bp
from .exceptions import UnknownSectionError
from .models import (
    MainLinkSelected, ManualToggle, OverlayToggled, RouteChanged, RouteState, SubLinkSelected,
)
from .registry import parse_section_id
from .session import drop_session, get_session
from core.utils.api_helpers import (
    api_login_required, error_response, get_json_or_error, safe_error_response,
)

logger = logging.getLogger('rtb.navigation.routes')


def _current_session():
    """Session of the signed-in user, with permissions resolved once the profile is known."""
    session = get_session(current_user.id)
    if not session.permissions_resolved:
        permissions = getattr(current_user, 'permissions', None)
        if permissions is not None:
            session.resolve_permissions(permissions)
    return session


def _apply(event):
    """Dispatch event for the current user and answer with the state it produced."""
    _, snapshot = _current_session().dispatch_with_snapshot(event)
    return jsonify({'success': True, 'navigation': snapshot})


def _section_or_404(section_id):
    try:
        return parse_section_id(section_id), None
    except UnknownSectionError as e:
        return None, error_response(str(e), 404)


# ════════════════════════════════════════════
# State
# ════════════════════════════════════════════

@navigation_bp.route('/api/state', methods=['GET'])
@api_login_required
def api_get_state():
    """Current per-section render state, sub-items and main links."""
    try:
        return jsonify({'success': True, 'navigation': _current_session().snapshot()})
    except Exception as e:
        return safe_error_response(e)


@navigation_bp.route('/api/reload', methods=['POST'])
@api_login_required
def api_reload():
    """Start over from stored preferences, as a full page reload does."""
    if drop_session(current_user.id):
        logger.info(f'Navigation session reset for user {current_user.id}')
    try:
        return jsonify({'success': True, 'navigation': _current_session().snapshot()})
    except Exception as e:
        return safe_error_response(e)


# ════════════════════════════════════════════
# Events
# ════════════════════════════════════════════

@navigation_bp.route('/api/route', methods=['POST'])
@api_login_required
def api_route_changed():
    """Report a navigation: {"pathname": "/report", "search": "?id=3"}."""
    data, error = get_json_or_error()
    if error:
        return error

    pathname = data.get('pathname')
    search = data.get('search') or ''
    if not isinstance(pathname, str) or not pathname.startswith('/'):
        return error_response('pathname must be an absolute path', 400)
    if not isinstance(search, str):
        return error_response('search must be a string', 400)

    try:
        return _apply(RouteChanged(RouteState(pathname=pathname, search=search)))
    except Exception as e:
        return safe_error_response(e)


@navigation_bp.route('/api/sections/<section_id>/toggle', methods=['POST'])
@api_login_required
def api_toggle_section(section_id):
    """User clicked a section header."""
    section, error = _section_or_404(section_id)
    if error:
        return error

    try:
        return _apply(ManualToggle(section))
    except Exception as e:
        return safe_error_response(e)


@navigation_bp.route('/api/sections/<section_id>/select', methods=['POST'])
@api_login_required
def api_select_sub_link(section_id):
    """User clicked one of the section's sub-items."""
    section, error = _section_or_404(section_id)
    if error:
        return error

    try:
        return _apply(SubLinkSelected(section))
    except Exception as e:
        return safe_error_response(e)


@navigation_bp.route('/api/main-link', methods=['POST'])
@api_login_required
def api_select_main_link():
    """User clicked a flat link (home, workload, ...)."""
    try:
        return _apply(MainLinkSelected())
    except Exception as e:
        return safe_error_response(e)


@navigation_bp.route('/api/overlay/toggle', methods=['POST'])
@api_login_required
def api_toggle_overlay():
    """Open or close the notifications overlay."""
    try:
        return _apply(OverlayToggled())
    except Exception as e:
        return safe_error_response(e)
