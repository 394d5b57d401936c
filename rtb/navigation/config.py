"""
Sidebar Navigation Configuration

Environment variables and settings for the navigation module.
"""

import os
from dataclasses import dataclass


STORAGE_BACKENDS = ('memory', 'postgres')


@dataclass
class NavigationConfig:
    """Navigation configuration settings."""

    # Where per-section open/closed flags are persisted
    STORAGE_BACKEND: str = 'memory'

    # Fallback when a section has never been persisted or storage is down
    DEFAULT_EXPANDED: bool = False

    # Debug-log every reduced event
    LOG_TRANSITIONS: bool = True

    # In-process sessions kept before the least recently used is evicted
    MAX_SESSIONS: int = 500

    @classmethod
    def from_env(cls) -> 'NavigationConfig':
        """Load configuration from environment variables."""
        backend = os.environ.get('NAV_STORAGE_BACKEND', 'memory').strip().lower()
        if backend not in STORAGE_BACKENDS:
            raise ValueError(
                f"NAV_STORAGE_BACKEND must be one of {', '.join(STORAGE_BACKENDS)}, got {backend!r}")
        max_sessions = int(os.environ.get('NAV_MAX_SESSIONS', '500'))
        if max_sessions < 1:
            raise ValueError(f'NAV_MAX_SESSIONS must be at least 1, got {max_sessions}')
        return cls(
            STORAGE_BACKEND=backend,
            DEFAULT_EXPANDED=os.environ.get(
                'NAV_DEFAULT_EXPANDED', 'false'
            ).lower() == 'true',
            LOG_TRANSITIONS=os.environ.get(
                'NAV_LOG_TRANSITIONS', 'true'
            ).lower() == 'true',
            MAX_SESSIONS=max_sessions,
        )


_config = None


def get_config() -> NavigationConfig:
    """Get the process-wide configuration, loading it on first use."""
    global _config
    if _config is None:
        _config = NavigationConfig.from_env()
    return _config


def reset_config():
    """Drop the cached configuration. Used in tests."""
    global _config
    _config = None
