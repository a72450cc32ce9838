"""
Data models for resource picker operations.
"""

from .config import PickerConfig
from .resource import Resource, ResourceKind, ResourceList, is_from_cache, kind_key, sort_by_name
from .items import (
    ItemButton,
    SelectResourceItem,
    SeparatorItem,
    SwitchProfileItem,
    CreateResourceItem,
    PickItem,
    HandoffResult,
    item_signature,
)
from .events import (
    ValueChanged,
    ItemAccepted,
    ItemButtonTriggered,
    ListHidden,
    LoadFailed,
    RenderFailed,
    PickerEvent,
)
from .exceptions import (
    ResourcePickerError,
    ConfigurationError,
    AWSCredentialsError,
    AuthenticationError,
    ResourceLoadError,
    StorageError,
    ResourceCreationError,
)

__all__ = [
    "PickerConfig",
    "Resource",
    "ResourceKind",
    "ResourceList",
    "is_from_cache",
    "kind_key",
    "sort_by_name",
    "ItemButton",
    "SelectResourceItem",
    "SeparatorItem",
    "SwitchProfileItem",
    "CreateResourceItem",
    "PickItem",
    "HandoffResult",
    "item_signature",
    "ValueChanged",
    "ItemAccepted",
    "ItemButtonTriggered",
    "ListHidden",
    "LoadFailed",
    "RenderFailed",
    "PickerEvent",
    "ResourcePickerError",
    "ConfigurationError",
    "AWSCredentialsError",
    "AuthenticationError",
    "ResourceLoadError",
    "StorageError",
    "ResourceCreationError",
]
