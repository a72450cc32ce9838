"""
Cache-first loading of resource lists from AWS.
"""

import asyncio
import logging
import time
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any, Generic, Iterator, List, Optional, TypeVar

from resource_picker.models.exceptions import ResourcePickerError
from resource_picker.models.resource import Resource, ResourceList
from resource_picker.services.auth import AuthHooks, SSOAuthenticator
from resource_picker.services.cache import ResourceCache
from resource_picker.services.error_handler import ErrorHandler


ClientT = TypeVar("ClientT")
ItemT = TypeVar("ItemT")


@dataclass
class LoadOptions:
    """Options for one resource load."""

    region: str
    profile: Optional[str] = None
    skip_cache: bool = False
    auth_hooks: Optional[AuthHooks] = None


class ResourceLoaderDefinition(ABC, Generic[ClientT, ItemT]):
    """How to enumerate one kind of resource."""

    service_name: str = "aws"
    operation_name: str = "list"

    @abstractmethod
    def init(self, options: LoadOptions) -> ClientT:
        """Create the remote client for the options' profile and region."""
        pass

    @abstractmethod
    def enumerate(self, client: ClientT, options: LoadOptions) -> Iterator[ItemT]:
        """Yield raw items, following the API's own pagination token."""
        pass

    @abstractmethod
    def map(self, item: ItemT, region: str) -> Resource:
        """Convert a raw item into a resource."""
        pass


class ResourceLoader:
    """Loads resources for one kind, serving cached lists first.

    A cached result is returned tagged ``from_cache=True``; a fresh result
    is stored in the cache and returned untagged.
    """

    def __init__(self, definition: ResourceLoaderDefinition,
                 cache: Optional[ResourceCache] = None,
                 authenticator: Optional[SSOAuthenticator] = None,
                 error_handler: Optional[ErrorHandler] = None):
        self.definition = definition
        self.cache = cache if cache is not None else ResourceCache()
        self.error_handler = error_handler or ErrorHandler()
        self.authenticator = authenticator or SSOAuthenticator(error_handler=self.error_handler)
        self.logger = logging.getLogger(__name__)

    async def __call__(self, options: LoadOptions) -> ResourceList:
        return await self.load(options)

    async def load(self, options: LoadOptions) -> ResourceList:
        """
        Load resources for the options' profile and region.

        Returns:
            ResourceList: Cached (tagged) or freshly enumerated resources

        Raises:
            AuthenticationError: If a required SSO login fails
            ResourcePickerError: If enumeration fails
        """
        if not options.skip_cache:
            cached = self.cache.get(options.region, options.profile)
            if cached is not None:
                self.logger.debug(
                    f"Serving {len(cached)} cached resources from {self.definition.service_name}",
                    extra={'context': {'region': options.region, 'profile': options.profile}}
                )
                return cached

        start_time = time.time()
        try:
            resources = await self.authenticator.run(
                lambda: asyncio.to_thread(self._enumerate, options),
                options.auth_hooks,
                options.profile,
            )
        except ResourcePickerError:
            raise
        except Exception as e:
            if self.error_handler.is_session_error(e):
                raise
            raise self.error_handler.handle_api_error(
                e, self.definition.operation_name, self.definition.service_name
            ) from e

        self.logger.info(
            f"Loaded {len(resources)} resources from "
            f"{self.definition.service_name}.{self.definition.operation_name}",
            extra={'context': {
                'region': options.region,
                'profile': options.profile,
                'duration_seconds': time.time() - start_time,
            }}
        )

        self.cache.set(options.region, options.profile, resources)
        return ResourceList(resources)

    def _enumerate(self, options: LoadOptions) -> List[Resource]:
        client: Any = self.definition.init(options)
        return [
            self.definition.map(item, options.region)
            for item in self.definition.enumerate(client, options)
        ]
