"""
Sidebar Navigation Exceptions
"""


class NavigationError(Exception):
    """Base exception for the navigation module."""
    pass


class StorageUnavailable(NavigationError):
    """Raised by a storage backend when a read or write cannot complete."""
    def __init__(self, key: str, operation: str, reason: str = None):
        self.key = key
        self.operation = operation
        self.reason = reason
        message = f"Storage {operation} failed for key {key!r}"
        if reason:
            message = f"{message}: {reason}"
        super().__init__(message)


class UnknownSectionError(NavigationError):
    """Raised when a section id does not name a registered section."""
    def __init__(self, section_id):
        self.section_id = section_id
        super().__init__(f"Unknown sidebar section: {section_id!r}")


class SectionConfigurationError(NavigationError):
    """Raised at import time when section definitions overlap or collide."""
    pass
