"""RTB Core Auth Models.

User model for Flask-Login authentication, built from a profiles row.
"""
from flask_login import UserMixin

from navigation.models import PermissionContext


class User(UserMixin):
    """User class for Flask-Login."""

    def __init__(self, user_data):
        self.id = user_data['id']
        self.email = user_data.get('email') or ''
        self.name = user_data.get('name')
        self.username = user_data.get('username')
        self.position = user_data.get('position')
        self.role = user_data.get('role')
        self.department = user_data.get('department')

    @property
    def display_name(self) -> str:
        """Username, then name, then the local part of the email."""
        if self.username:
            return self.username
        if self.name:
            return self.name
        return self.email.split('@')[0] if self.email else ''

    @property
    def permissions(self) -> PermissionContext:
        return PermissionContext.from_profile(self.position, self.role)
