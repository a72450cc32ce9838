"""
Error classification and translation for AWS resource operations.
"""

import logging
import re
from typing import List, Optional

from botocore.exceptions import BotoCoreError, ClientError, NoCredentialsError
from botocore.exceptions import EndpointConnectionError, ConnectTimeoutError, ReadTimeoutError
from botocore.exceptions import SSOTokenLoadError, TokenRetrievalError, UnauthorizedSSOTokenError

from ..models.exceptions import (
    ResourcePickerError, ConfigurationError, AWSCredentialsError,
    AuthenticationError, ResourceLoadError, StorageError
)


class ErrorHandler:
    """Classifies AWS errors and converts them to picker exceptions."""

    # Errors that an interactive SSO login can fix
    SESSION_ERROR_TYPES = (
        UnauthorizedSSOTokenError,
        SSOTokenLoadError,
        TokenRetrievalError,
    )

    SESSION_ERROR_PATTERNS = (
        re.compile(r"The SSO session associated with this profile (has expired|is invalid|.*invalid)"),
        re.compile(r"SSO session token (was )?not found or (is )?invalid", re.IGNORECASE),
        re.compile(r"session token (not found|.*invalid)", re.IGNORECASE),
        re.compile(r"Error loading SSO Token"),
    )

    ACCESS_DENIED_ERROR_CODES = {
        'AccessDenied',
        'AccessDeniedException',
        'UnauthorizedOperation',
        'UnrecognizedClientException',
        'ExpiredTokenException',
    }

    def __init__(self, logger: Optional[logging.Logger] = None):
        """
        Initialize the error handler.

        Args:
            logger: Optional logger instance for error reporting
        """
        self.logger = logger or logging.getLogger(__name__)

    def is_session_error(self, error: BaseException) -> bool:
        """
        Determine whether an error means the SSO session must be renewed.

        Args:
            error: The exception that occurred

        Returns:
            bool: True if an interactive login should be attempted
        """
        if isinstance(error, self.SESSION_ERROR_TYPES):
            return True

        message = str(error)
        return any(pattern.search(message) for pattern in self.SESSION_ERROR_PATTERNS)

    def handle_api_error(self, error: Exception, operation: str,
                         service: str = 'aws') -> ResourcePickerError:
        """
        Convert an AWS API error into a picker exception.

        Args:
            error: The exception that occurred
            operation: Name of the operation that failed
            service: AWS service name

        Returns:
            ResourcePickerError: Exception to raise in place of the original
        """
        context = {'service': service, 'operation': operation}

        if isinstance(error, ResourcePickerError):
            return error

        if isinstance(error, ClientError):
            error_code = error.response.get('Error', {}).get('Code', 'Unknown')
            error_message = error.response.get('Error', {}).get('Message', str(error))
            context['request_id'] = error.response.get('ResponseMetadata', {}).get('RequestId')

            self.logger.error(
                f"AWS API error in {service}.{operation}: {error_code} - {error_message}",
                extra={'context': dict(context, error_code=error_code)}
            )

            if error_code in self.ACCESS_DENIED_ERROR_CODES:
                return AWSCredentialsError(
                    f"Access denied for {service}.{operation}: {error_message}",
                    error_code=error_code,
                    context=context
                )

            return ResourceLoadError(
                f"{error_code}: {error_message}",
                error_code=error_code,
                context=context
            )

        if isinstance(error, NoCredentialsError):
            self.logger.error("AWS credentials not found or invalid")
            return AWSCredentialsError("AWS credentials not found or invalid", context=context)

        if isinstance(error, (EndpointConnectionError, ConnectTimeoutError, ReadTimeoutError)):
            error_message = f"Network error in {service}.{operation}: {str(error)}"
            self.logger.warning(error_message)
            return ResourceLoadError(error_message, context=context)

        if isinstance(error, BotoCoreError):
            error_message = f"Boto3 error in {service}.{operation}: {str(error)}"
            self.logger.error(error_message)
            return ResourceLoadError(error_message, context=context)

        error_message = f"Unknown error in {service}.{operation}: {str(error)}"
        self.logger.error(error_message, exc_info=error)
        return ResourceLoadError(error_message, context=context)

    def get_error_remediation_steps(self, error: Exception) -> List[str]:
        """
        Get suggested remediation steps for common errors.

        Args:
            error: The exception that occurred

        Returns:
            List[str]: List of suggested remediation steps
        """
        if isinstance(error, AuthenticationError):
            return [
                "Run 'aws sso login --profile <profile>' manually and check its output",
                "Verify the sso_start_url and sso_region of the profile in ~/.aws/config",
                "Make sure the AWS CLI v2 is installed and on PATH"
            ]

        if isinstance(error, AWSCredentialsError):
            return [
                "Check that the selected profile exists in ~/.aws/config",
                "Verify the profile's role has list/describe permissions for this resource kind",
                "Switch profile by typing @<profile> in the filter box"
            ]

        if isinstance(error, ConfigurationError):
            return [
                "Review the configuration file for syntax errors",
                "Check that the default region is a valid AWS region name",
                "Regenerate a sample with --create-sample-config"
            ]

        if isinstance(error, StorageError):
            return [
                "Check permissions on the picker state file",
                "Remove or repair the state file if it is not valid JSON"
            ]

        return [
            "Check the log file for more detailed information",
            "Verify AWS credentials and permissions",
            "Check network connectivity to AWS services"
        ]
