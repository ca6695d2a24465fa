"""
ItemsBlocker Exception Hierarchy

All exceptions inherit from ItemsBlockerError for easy catching.
Validation errors are raised before any state change, so catching one
means the store is exactly as it was.
"""


class ItemsBlockerError(Exception):
    """Base exception for all ItemsBlocker errors"""

    def __init__(self, message: str, details: dict = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}

    def __str__(self):
        if self.details:
            details_str = ", ".join(f"{k}={v}" for k, v in self.details.items())
            return f"{self.message} ({details_str})"
        return self.message


class ValidationError(ItemsBlockerError):
    """Raised when a block/unblock request is rejected"""
    pass


class ItemNotFoundError(ValidationError):
    """Raised when an item token cannot be resolved by the catalog"""
    pass


class ParticipantNotFoundError(ValidationError):
    """Raised when a participant token cannot be resolved"""
    pass


class DurationError(ValidationError):
    """Raised when a duration token is unparsable or not positive"""
    pass


class ScopeError(ValidationError):
    """Raised when a scope token is unknown or contradicts the duration"""
    pass


class NoActiveRuleError(ItemsBlockerError):
    """Raised when clearing an item that has no rule at all"""
    pass


class PermissionDeniedError(ItemsBlockerError):
    """Raised when an actor lacks the admin permission"""
    pass


class StoreError(ItemsBlockerError):
    """Raised when the state file cannot be read or written"""
    pass


class ConfigError(ItemsBlockerError):
    """Raised when the configuration file is unreadable or invalid"""
    pass
