"""
Configuration data models for the resource picker.
"""

from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Optional
import re


DEFAULT_STATE_DIR = "~/.aws-resource-picker"


@dataclass
class PickerConfig:
    """Configuration settings for the resource picker."""

    # AWS Configuration
    default_region: str = "us-east-1"
    aws_config_file: Optional[str] = None  # Defaults to AWS_CONFIG_FILE or ~/.aws/config
    sso_login_command: List[str] = field(default_factory=lambda: ["aws", "sso", "login"])

    # Storage Configuration
    state_file_path: str = f"{DEFAULT_STATE_DIR}/state.json"

    # Logging Configuration
    logging_level: str = "INFO"
    logging_file_path: Optional[str] = f"{DEFAULT_STATE_DIR}/picker.log"

    def validate(self) -> List[str]:
        """
        Validate configuration settings and return list of validation errors.

        Returns:
            List[str]: List of validation error messages. Empty if valid.
        """
        errors = []

        errors.extend(self._validate_aws_settings())
        errors.extend(self._validate_storage_settings())
        errors.extend(self._validate_logging_settings())

        return errors

    def _validate_aws_settings(self) -> List[str]:
        """Validate AWS configuration settings."""
        errors = []

        if not self.default_region:
            errors.append("Default AWS region is required")
        elif not re.match(r'^[a-z]{2}(-[a-z]+)+-\d+$', self.default_region):
            errors.append("Default AWS region format is invalid")

        if not isinstance(self.sso_login_command, list) or not self.sso_login_command:
            errors.append("SSO login command must be a non-empty list")
        elif not all(isinstance(part, str) and part for part in self.sso_login_command):
            errors.append("SSO login command must contain only non-empty strings")

        return errors

    def _validate_storage_settings(self) -> List[str]:
        """Validate persisted state settings."""
        errors = []

        if not self.state_file_path:
            errors.append("State file path is required")
        elif Path(self.state_file_path).suffix.lower() != '.json':
            errors.append("State file must be a .json file")

        return errors

    def _validate_logging_settings(self) -> List[str]:
        """Validate logging configuration settings."""
        errors = []

        valid_levels = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]
        if self.logging_level not in valid_levels:
            errors.append(f"Logging level must be one of: {', '.join(valid_levels)}")

        return errors

    @property
    def resolved_state_file_path(self) -> Path:
        return Path(self.state_file_path).expanduser()

    @property
    def resolved_logging_file_path(self) -> Optional[Path]:
        if not self.logging_file_path:
            return None
        return Path(self.logging_file_path).expanduser()
