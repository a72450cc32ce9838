"""
Service classes for resource picker operations.
"""

from .base import BaseKeyValueStorage, BasePickUI, BaseSelectionList, BaseSettings, EventSubscription
from .storage import JsonFileStorage, MemoryStorage
from .mru import MRULedger, MRU_CAPACITY
from .cache import ResourceCache
from .error_handler import ErrorHandler
from .auth import AuthHooks, SSOAuthenticator
from .loader import LoadOptions, ResourceLoader, ResourceLoaderDefinition
from .settings import StoredSettings
from .logging import LoggingService, StructuredFormatter
from .values import SecretsManagerRepository, SSMParameterRepository, ValueSecrecy, show_value_menu
from .creation import create_secret, create_ssm_parameter

__all__ = [
    "BaseKeyValueStorage",
    "BasePickUI",
    "BaseSelectionList",
    "BaseSettings",
    "EventSubscription",
    "JsonFileStorage",
    "MemoryStorage",
    "MRULedger",
    "MRU_CAPACITY",
    "ResourceCache",
    "ErrorHandler",
    "AuthHooks",
    "SSOAuthenticator",
    "LoadOptions",
    "ResourceLoader",
    "ResourceLoaderDefinition",
    "StoredSettings",
    "LoggingService",
    "StructuredFormatter",
    "SecretsManagerRepository",
    "SSMParameterRepository",
    "ValueSecrecy",
    "show_value_menu",
    "create_secret",
    "create_ssm_parameter"
]
