"""
Active profile and region, persisted in key-value storage.
"""

import logging
import os
from pathlib import Path
from typing import List, Optional, Set, Tuple

from botocore import configloader
from botocore.exceptions import ConfigNotFound, ConfigParseError

from resource_picker.services.base import BaseKeyValueStorage, BaseSettings


PROFILE_KEY = "profile"
REGION_KEY = "region"


class StoredSettings(BaseSettings):
    """Profile and region settings backed by persisted storage.

    Known profile names come from the AWS config file and are re-read only
    when the file's modification time changes.
    """

    def __init__(self, storage: BaseKeyValueStorage, config_filepath: Optional[str] = None):
        self.storage = storage
        self._config_filepath = config_filepath
        self.logger = logging.getLogger(__name__)
        self._profile_names: Optional[Set[str]] = None
        self._profile_names_stamp: Optional[Tuple[float, int]] = None

    @property
    def profile(self) -> Optional[str]:
        return self.storage.get(PROFILE_KEY)

    async def set_profile(self, profile: str) -> None:
        await self.storage.update(PROFILE_KEY, profile)
        os.environ["AWS_PROFILE"] = profile
        self.logger.info(f"Active profile set to '{profile}'")

    @property
    def region(self) -> Optional[str]:
        return self.storage.get(REGION_KEY)

    async def set_region(self, region: str) -> None:
        await self.storage.update(REGION_KEY, region)
        self.logger.info(f"Active region set to '{region}'")

    @property
    def config_filepath(self) -> str:
        """Path to the AWS config file (``AWS_CONFIG_FILE`` or ``~/.aws/config``)."""
        if self._config_filepath:
            return str(Path(self._config_filepath).expanduser())
        return os.environ.get("AWS_CONFIG_FILE") or str(Path.home() / ".aws" / "config")

    def is_profile_name(self, name: str) -> bool:
        stamp = self._config_stamp()
        if self._profile_names is None or stamp != self._profile_names_stamp:
            self._profile_names = set(self.enumerate_profile_names() or [])
            self._profile_names_stamp = stamp
        return name in self._profile_names

    def enumerate_profile_names(self) -> Optional[List[str]]:
        """
        Enumerate profile names from the AWS config file.

        Returns:
            Optional[List[str]]: Profile names in file order, None if the file is missing
        """
        try:
            config = configloader.load_config(self.config_filepath)
        except ConfigNotFound:
            return None
        except ConfigParseError as e:
            self.logger.warning(f"Unable to parse AWS config file: {str(e)}")
            return []

        return list(config.get("profiles", {}).keys())

    def _config_stamp(self) -> Optional[Tuple[float, int]]:
        try:
            stat = os.stat(self.config_filepath)
        except OSError:
            return None
        return (stat.st_mtime, stat.st_size)
