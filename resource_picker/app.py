"""
Application wiring for the resource picker command line tool.
"""

import argparse
import logging
import os
from typing import Dict, Optional

import boto3

from resource_picker.config.manager import ConfigurationManager
from resource_picker.models.config import PickerConfig
from resource_picker.models.exceptions import ResourcePickerError
from resource_picker.models.items import HandoffResult, SelectResourceItem
from resource_picker.models.resource import Resource, ResourceKind
from resource_picker.picker import PickParams, pick
from resource_picker.services.auth import SSOAuthenticator
from resource_picker.services.base import BasePickUI
from resource_picker.services.creation import create_secret, create_ssm_parameter
from resource_picker.services.error_handler import ErrorHandler
from resource_picker.services.loader import ResourceLoader
from resource_picker.services.logging import LoggingService
from resource_picker.services.mru import MRULedger
from resource_picker.services.providers import build_loader, region_id_of, region_url
from resource_picker.services.settings import StoredSettings
from resource_picker.services.storage import JsonFileStorage
from resource_picker.services.values import (
    SecretsManagerRepository,
    SSMParameterRepository,
    show_value_menu,
)
from resource_picker.ui.tui import TextualPickUI


class ResourcePickerApp:
    """Coordinates configuration, persisted state, and the picker."""

    def __init__(self, args: argparse.Namespace, ui: Optional[BasePickUI] = None):
        """
        Initialize the application.

        Args:
            args: Parsed command line arguments
            ui: UI to pick with, defaults to the textual terminal UI
        """
        self.config_path: Optional[str] = args.config
        self.kind = ResourceKind(args.kind)
        self.profile_override: Optional[str] = args.profile
        self.region_override: Optional[str] = args.region
        self.verbose: bool = args.verbose
        self.log_file: Optional[str] = args.log_file

        self.ui: BasePickUI = ui or TextualPickUI()
        self.config: Optional[PickerConfig] = None
        self.config_manager: Optional[ConfigurationManager] = None
        self.logging_service: Optional[LoggingService] = None
        self.logger = logging.getLogger(__name__)

        self.settings: Optional[StoredSettings] = None
        self.mru: Optional[MRULedger] = None
        self.authenticator: Optional[SSOAuthenticator] = None
        self._loaders: Dict[ResourceKind, ResourceLoader] = {}

    def initialize(self) -> bool:
        """
        Load configuration and set up logging and persisted state.

        Returns:
            bool: True if initialization successful

        Raises:
            ConfigurationError: If configuration loading fails
            StorageError: If the state file cannot be read
        """
        self.config_manager = ConfigurationManager()
        self.config = self.config_manager.load_config(self.config_path)
        if self.log_file:
            self.config.logging_file_path = self.log_file

        self.logging_service = LoggingService(self.config, verbose=self.verbose)
        self.logging_service.log_debug(
            "Initializing resource picker",
            context={'kind': self.kind.value, 'config_path': self.config_path}
        )

        storage = JsonFileStorage(str(self.config.resolved_state_file_path))
        self.settings = StoredSettings(storage, self.config.aws_config_file)
        self.mru = MRULedger(storage)
        self.authenticator = SSOAuthenticator(
            self.config.sso_login_command,
            ErrorHandler(self.logging_service.get_logger())
        )
        return True

    async def run(self) -> Optional[SelectResourceItem]:
        """
        Make sure a profile and region are set, then pick a resource.

        Returns:
            Optional[SelectResourceItem]: The selected item, or None

        Raises:
            ResourcePickerError: If the application is not initialized, or
                loading or authentication fails
        """
        if self.settings is None:
            raise ResourcePickerError("Application is not initialized")

        try:
            return await self.ui.run(self._run)
        except Exception as e:
            self.logging_service.log_error("Resource pick failed", e, {
                'kind': self.kind.value,
                'profile': self.settings.profile,
                'region': self.settings.region,
            })
            raise

    async def _run(self) -> Optional[SelectResourceItem]:
        if self.profile_override:
            await self.settings.set_profile(self.profile_override)
        if self.region_override:
            await self.settings.set_region(self.region_override)

        if not await self.ensure_profile():
            self.logging_service.log_warning("No AWS profile chosen, nothing to pick from")
            return None

        if self.kind == ResourceKind.REGION:
            return await self._pick_region()

        if not await self.ensure_region():
            self.logging_service.log_warning(
                "No region chosen, nothing to pick from", {'profile': self.settings.profile}
            )
            return None

        selected = await pick(self.make_params(self.kind))
        if selected is not None:
            self.logging_service.log_info(
                f"Selected {self.kind.label} {selected.resource.name}",
                context={'url': selected.url, 'profile': self.settings.profile, 'region': self.settings.region}
            )
        return selected

    async def ensure_profile(self) -> bool:
        """Prompt for a profile if none is stored."""
        profile = self.settings.profile or await self.choose_profile()
        if not profile:
            return False

        os.environ["AWS_PROFILE"] = profile
        return True

    async def choose_profile(self) -> Optional[str]:
        """
        Offer the profiles from the AWS config file, the current one first.

        Returns:
            Optional[str]: The chosen profile, or None
        """
        config_filepath = self.settings.config_filepath
        profiles = self.settings.enumerate_profile_names()
        if profiles is None:
            await self.ui.show_error(f"No AWS config file found at {config_filepath}")
            return None

        if not profiles:
            await self.ui.show_error(f"No profiles found in {config_filepath}")
            return None

        current = self.settings.profile
        if current in profiles:
            profiles.remove(current)
            profiles.insert(0, current)

        profile = await self.ui.pick_string(profiles, placeholder="Choose an AWS profile", title="Profile")
        if profile:
            await self.settings.set_profile(profile)
        return profile

    async def ensure_region(self) -> bool:
        """Prompt for a region if none is stored."""
        if self.settings.region:
            return True

        await self._pick_region()
        return bool(self.settings.region)

    async def _pick_region(self) -> Optional[SelectResourceItem]:
        current = self.settings.region or self.config.default_region
        params = self.make_params(ResourceKind.REGION)
        params.active_item_url = region_url(current)
        return await pick(params)

    async def _select_region(self, resource: Resource) -> HandoffResult:
        await self.settings.set_region(region_id_of(resource))
        return HandoffResult(finished=True)

    def make_params(self, kind: ResourceKind) -> PickParams:
        """Build picker inputs, with the handlers that apply to the kind."""
        params = PickParams(
            ui=self.ui,
            resource_kind=kind,
            settings=self.settings,
            mru=self.mru,
            load_resources=self._loader(kind),
            default_region=self.config.default_region,
        )

        if kind == ResourceKind.REGION:
            params.on_selected = self._select_region

        elif kind == ResourceKind.PARAMETER:
            params.on_selected = lambda resource: show_value_menu(
                self.ui, resource, 'parameter', SSMParameterRepository(self._session(), resource.name),
                output=self.ui.write
            )
            params.on_unmatched = lambda text: create_ssm_parameter(
                self.ui, SSMParameterRepository(self._session()), text
            )

        elif kind == ResourceKind.SECRET:
            params.on_selected = lambda resource: show_value_menu(
                self.ui, resource, 'secret', SecretsManagerRepository(self._session(), resource.arn or resource.name),
                output=self.ui.write
            )
            params.on_unmatched = lambda text: create_secret(
                self.ui, SecretsManagerRepository(self._session()), text
            )

        return params

    def _loader(self, kind: ResourceKind) -> ResourceLoader:
        # One loader, and so one cache, per kind for the life of the app
        if kind not in self._loaders:
            self._loaders[kind] = build_loader(kind, self.authenticator)
        return self._loaders[kind]

    def _session(self) -> boto3.Session:
        return self.config_manager.create_aws_session(self.settings.profile, self.settings.region)

    def close(self) -> None:
        """Flush and close log handlers."""
        if self.logging_service:
            self.logging_service.close()
