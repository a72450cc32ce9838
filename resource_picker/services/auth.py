"""
SSO re-authentication around AWS operations.
"""

import asyncio
import logging
from typing import Awaitable, Callable, List, Optional, Sequence, TypeVar

from resource_picker.models.exceptions import AuthenticationError
from resource_picker.services.error_handler import ErrorHandler


T = TypeVar("T")


class AuthHooks:
    """Callbacks fired around an interactive login. Defaults do nothing."""

    def on_attempt(self) -> None:
        pass

    def on_success(self) -> None:
        pass

    def on_failure(self, error: Exception) -> None:
        pass


class SSOAuthenticator:
    """Runs an operation and, if the SSO session is stale, logs in and retries once."""

    def __init__(self, login_command: Sequence[str] = ("aws", "sso", "login"),
                 error_handler: Optional[ErrorHandler] = None):
        self.login_command: List[str] = list(login_command)
        self.error_handler = error_handler or ErrorHandler()
        self.logger = logging.getLogger(__name__)

    async def run(self, operation: Callable[[], Awaitable[T]],
                  hooks: Optional[AuthHooks] = None,
                  profile: Optional[str] = None) -> T:
        """
        Run an async operation with SSO re-authentication.

        Args:
            operation: Zero-argument callable returning a fresh awaitable
            hooks: Login progress callbacks
            profile: Profile to log in with

        Returns:
            The operation's result

        Raises:
            AuthenticationError: If the interactive login fails
            Exception: Any non-session error from the operation, unchanged
        """
        try:
            return await operation()
        except Exception as error:
            if not self.error_handler.is_session_error(error):
                raise
            self.logger.info(
                f"SSO session for profile '{profile}' is no longer valid, logging in",
                extra={'context': {'profile': profile, 'error': str(error)}}
            )

        return await self._login_and_retry(operation, hooks or AuthHooks(), profile)

    async def _login_and_retry(self, operation: Callable[[], Awaitable[T]],
                               hooks: AuthHooks, profile: Optional[str]) -> T:
        hooks.on_attempt()

        try:
            await self.login(profile)
        except Exception as error:
            self.logger.error(f"SSO login failed for profile '{profile}': {str(error)}")
            hooks.on_failure(error)
            raise

        hooks.on_success()
        self.logger.info(f"SSO login succeeded for profile '{profile}', retrying")
        return await operation()

    async def login(self, profile: Optional[str]) -> None:
        """
        Run the interactive login command bound to a profile.

        Raises:
            AuthenticationError: If the command is missing or exits non-zero
        """
        command = list(self.login_command)
        if profile:
            command.extend(["--profile", profile])

        try:
            process = await asyncio.create_subprocess_exec(*command)
        except FileNotFoundError:
            raise AuthenticationError(
                f"Login command not found: {command[0]}",
                context={'command': command}
            )

        exit_code = await process.wait()
        if exit_code != 0:
            raise AuthenticationError(
                f"{' '.join(self.login_command)} exited with code {exit_code}",
                error_code=str(exit_code),
                context={'command': command, 'profile': profile}
            )
