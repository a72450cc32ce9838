"""
Configuration management for the resource picker.
"""

import json
import yaml
from pathlib import Path
from typing import Dict, Any, Optional
import boto3
from botocore.exceptions import BotoCoreError, ProfileNotFound

from ..models.config import PickerConfig
from ..models.exceptions import ConfigurationError, AWSCredentialsError


def create_aws_session(profile: Optional[str], region: Optional[str]) -> boto3.Session:
    """
    Create an AWS session bound to a profile and region.

    Args:
        profile: Named profile, or None for the default credential chain
        region: Region name

    Returns:
        boto3.Session: Configured AWS session

    Raises:
        AWSCredentialsError: If the profile does not exist
    """
    try:
        return boto3.Session(profile_name=profile or None, region_name=region)
    except ProfileNotFound as e:
        raise AWSCredentialsError(f"AWS profile not found: {str(e)}", context={'profile': profile})
    except BotoCoreError as e:
        raise AWSCredentialsError(f"Failed to create AWS session: {str(e)}", context={'profile': profile})


class ConfigurationManager:
    """Manages configuration loading, validation, and AWS session creation."""

    def __init__(self):
        self._config: Optional[PickerConfig] = None

    def load_config(self, config_path: Optional[str] = None) -> PickerConfig:
        """
        Load configuration from YAML or JSON file.

        Args:
            config_path: Path to configuration file, or None for defaults

        Returns:
            PickerConfig: Loaded and validated configuration

        Raises:
            ConfigurationError: If configuration is invalid or cannot be loaded
        """
        if config_path is None:
            self._config = PickerConfig()
            self.validate_config(self._config)
            return self._config

        try:
            config_file = Path(config_path).expanduser()

            if not config_file.exists():
                raise ConfigurationError(f"Configuration file not found: {config_path}")

            # Load configuration based on file extension
            with open(config_file, 'r', encoding='utf-8') as f:
                if config_file.suffix.lower() in ['.yaml', '.yml']:
                    config_data = yaml.safe_load(f) or {}
                elif config_file.suffix.lower() == '.json':
                    config_data = json.load(f)
                else:
                    raise ConfigurationError(
                        f"Unsupported configuration file format: {config_file.suffix}. "
                        "Supported formats: .yaml, .yml, .json"
                    )

            if not isinstance(config_data, dict):
                raise ConfigurationError("Configuration root must be a mapping")

            flat_config = self._flatten_config(config_data)
            self._config = PickerConfig(**flat_config)
            self.validate_config(self._config)

            return self._config

        except ConfigurationError:
            raise
        except yaml.YAMLError as e:
            raise ConfigurationError(f"YAML parsing error: {str(e)}")
        except json.JSONDecodeError as e:
            raise ConfigurationError(f"JSON parsing error: {str(e)}")
        except TypeError as e:
            raise ConfigurationError(f"Configuration structure error: {str(e)}")
        except Exception as e:
            raise ConfigurationError(f"Failed to load configuration: {str(e)}")

    def _flatten_config(self, config_data: Dict[str, Any]) -> Dict[str, Any]:
        """
        Flatten nested configuration dictionary to match PickerConfig fields.

        Args:
            config_data: Nested configuration dictionary

        Returns:
            Dict[str, Any]: Flattened configuration dictionary
        """
        flat_config = {}

        # AWS settings
        aws_config = config_data.get('aws') or {}
        flat_config['default_region'] = aws_config.get('default_region')
        flat_config['aws_config_file'] = aws_config.get('config_file')
        flat_config['sso_login_command'] = aws_config.get('sso_login_command')

        # Storage settings
        storage_config = config_data.get('storage') or {}
        flat_config['state_file_path'] = storage_config.get('state_file')

        # Logging settings
        logging_config = config_data.get('logging') or {}
        flat_config['logging_level'] = logging_config.get('level')
        flat_config['logging_file_path'] = logging_config.get('file_path')

        # Remove None values
        return {k: v for k, v in flat_config.items() if v is not None}

    def validate_config(self, config: PickerConfig) -> bool:
        """
        Validate configuration settings.

        Args:
            config: Configuration to validate

        Returns:
            bool: True if valid

        Raises:
            ConfigurationError: If configuration is invalid
        """
        validation_errors = config.validate()
        if validation_errors:
            raise ConfigurationError(
                f"Configuration validation failed:\n" +
                "\n".join(f"- {error}" for error in validation_errors)
            )
        return True

    def create_aws_session(self, profile: Optional[str], region: Optional[str] = None) -> boto3.Session:
        """
        Create AWS session for a profile, defaulting to the configured region.

        Raises:
            ConfigurationError: If configuration is not loaded
        """
        if self._config is None:
            raise ConfigurationError("No configuration loaded")

        return create_aws_session(profile, region or self._config.default_region)

    def create_sample_config(self, output_path: str) -> None:
        """
        Create a sample configuration file.

        Args:
            output_path: Path where to create the sample configuration
        """
        defaults = PickerConfig()
        sample_config = {
            'aws': {
                'default_region': defaults.default_region,
                'sso_login_command': list(defaults.sso_login_command)
            },
            'storage': {
                'state_file': defaults.state_file_path
            },
            'logging': {
                'level': defaults.logging_level,
                'file_path': defaults.logging_file_path
            }
        }

        output_file = Path(output_path).expanduser()

        # Create directory if it doesn't exist
        output_file.parent.mkdir(parents=True, exist_ok=True)

        with open(output_file, 'w', encoding='utf-8') as f:
            yaml.dump(sample_config, f, default_flow_style=False, indent=2)

    @property
    def config(self) -> Optional[PickerConfig]:
        """Get the currently loaded configuration."""
        return self._config
