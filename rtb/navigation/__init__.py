"""RTB Sidebar Navigation Module.

Keeps the collapsible sidebar groups in sync with the current route,
the user's permissions and their saved open/closed preferences.
"""
from flask import Blueprint

navigation_bp = Blueprint('navigation', __name__, url_prefix='/navigation')

from . import routes  # noqa: E402, F401
