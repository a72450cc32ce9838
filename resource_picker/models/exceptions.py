"""
Custom exception classes for resource picker operations.
"""

from typing import Optional, Dict, Any


class ResourcePickerError(Exception):
    """Base exception for resource picker operations."""
    
    def __init__(self, message: str, error_code: Optional[str] = None, 
                 context: Optional[Dict[str, Any]] = None):
        super().__init__(message)
        self.message = message
        self.error_code = error_code
        self.context = context or {}


class ConfigurationError(ResourcePickerError):
    """Exception raised for configuration-related errors."""
    pass


class AWSCredentialsError(ResourcePickerError):
    """Exception raised for AWS credentials-related errors."""
    pass


class AuthenticationError(AWSCredentialsError):
    """Exception raised when an interactive SSO login fails."""
    pass


class ResourceLoadError(ResourcePickerError):
    """Exception raised when a resource list cannot be enumerated."""
    pass


class StorageError(ResourcePickerError):
    """Exception raised for persisted state read/write errors."""
    pass


class ResourceCreationError(ResourcePickerError):
    """Exception raised when a new resource cannot be created."""
    pass
