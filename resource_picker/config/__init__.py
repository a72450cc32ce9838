"""
Configuration loading for the resource picker.
"""

from .manager import ConfigurationManager, create_aws_session

__all__ = [
    "ConfigurationManager",
    "create_aws_session"
]
