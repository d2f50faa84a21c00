"""Exceptions raised by the policy adapter."""


class AdapterError(Exception):
    """Base exception for policy adapter errors"""
    pass


class ConnectionSetupError(AdapterError, ConnectionError):
    """Raised when the storage session cannot be opened"""
    pass


class StorageOperationError(AdapterError):
    """Raised when a find/insert/delete/drop call against storage fails"""

    def __init__(self, operation: str, message: str):
        super().__init__(f"{operation} failed: {message}")
        self.operation = operation


class FilteredPolicySaveError(AdapterError, PermissionError):
    """Raised when saving a policy that was loaded through a filter"""
    pass


class DecodeError(AdapterError, ValueError):
    """Raised when a stored document cannot be decoded into a rule"""
    pass


class EncodeError(AdapterError, ValueError):
    """Raised when a rule cannot be encoded into a stored document"""
    pass


class InvalidFilterError(AdapterError, ValueError):
    """Raised when a load filter is not an equality selector over the rule schema"""
    pass
