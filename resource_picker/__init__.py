"""
AWS Resource Picker

Browse AWS resources in a filterable list, most recently used first.
"""

from .config import ConfigurationManager
from .picker import PickParams, ResourcePicker, pick
from .models import (
    PickerConfig,
    Resource,
    ResourceKind,
    ResourceList,
    SelectResourceItem,
    HandoffResult,
    ResourcePickerError,
    ConfigurationError,
    AWSCredentialsError,
    AuthenticationError,
    ResourceLoadError,
    StorageError,
    ResourceCreationError
)

__version__ = "1.0.0"
__author__ = "AWS Resource Picker"

__all__ = [
    "ConfigurationManager",
    "PickParams",
    "ResourcePicker",
    "pick",
    "PickerConfig",
    "Resource",
    "ResourceKind",
    "ResourceList",
    "SelectResourceItem",
    "HandoffResult",
    "ResourcePickerError",
    "ConfigurationError",
    "AWSCredentialsError",
    "AuthenticationError",
    "ResourceLoadError",
    "StorageError",
    "ResourceCreationError"
]
