"""Sidebar preference repositories package."""
from .preference_repository import PreferenceRepository, UserPreferenceBackend

__all__ = ['PreferenceRepository', 'UserPreferenceBackend']
