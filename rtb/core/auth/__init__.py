"""RTB Core Authentication Module.

Flask-Login user model built from the profiles table.
"""
