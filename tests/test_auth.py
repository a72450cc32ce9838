"""
Tests for SSO re-authentication.
"""

from unittest.mock import AsyncMock, MagicMock, patch

import pytest
from botocore.exceptions import UnauthorizedSSOTokenError

from resource_picker.models.exceptions import AuthenticationError
from resource_picker.services.auth import AuthHooks, SSOAuthenticator


class RecordingHooks(AuthHooks):

    def __init__(self):
        self.events = []

    def on_attempt(self):
        self.events.append('attempt')

    def on_success(self):
        self.events.append('success')

    def on_failure(self, error):
        self.events.append('failure')


def make_operation(*outcomes):
    """Operation that raises or returns each outcome in turn."""
    calls = []

    async def operation():
        outcome = outcomes[len(calls)]
        calls.append(outcome)
        if isinstance(outcome, Exception):
            raise outcome
        return outcome

    return operation, calls


def login_process(exit_code=0):
    process = MagicMock()
    process.wait = AsyncMock(return_value=exit_code)
    return AsyncMock(return_value=process)


class TestSSOAuthenticator:

    @pytest.mark.asyncio
    async def test_success_needs_no_login(self):
        operation, calls = make_operation('ok')
        authenticator = SSOAuthenticator()

        with patch('asyncio.create_subprocess_exec', login_process()) as spawn:
            assert await authenticator.run(operation) == 'ok'

        spawn.assert_not_called()
        assert len(calls) == 1

    @pytest.mark.asyncio
    async def test_other_errors_are_not_retried(self):
        operation, calls = make_operation(ValueError("bad input"))
        authenticator = SSOAuthenticator()

        with patch('asyncio.create_subprocess_exec', login_process()) as spawn:
            with pytest.raises(ValueError):
                await authenticator.run(operation)

        spawn.assert_not_called()
        assert len(calls) == 1

    @pytest.mark.asyncio
    async def test_expired_session_logs_in_and_retries_once(self):
        operation, calls = make_operation(
            Exception("The SSO session associated with this profile has expired or is otherwise invalid"),
            'ok',
        )
        hooks = RecordingHooks()
        authenticator = SSOAuthenticator()

        with patch('asyncio.create_subprocess_exec', login_process()) as spawn:
            result = await authenticator.run(operation, hooks, profile='dev')

        assert result == 'ok'
        assert len(calls) == 2
        assert hooks.events == ['attempt', 'success']
        spawn.assert_called_once_with('aws', 'sso', 'login', '--profile', 'dev')

    @pytest.mark.asyncio
    async def test_botocore_token_error_triggers_login(self):
        operation, calls = make_operation(UnauthorizedSSOTokenError(), 'ok')
        authenticator = SSOAuthenticator()

        with patch('asyncio.create_subprocess_exec', login_process()) as spawn:
            assert await authenticator.run(operation) == 'ok'

        spawn.assert_called_once_with('aws', 'sso', 'login')

    @pytest.mark.asyncio
    async def test_second_failure_propagates(self):
        expired = Exception("SSO session token not found or invalid")
        operation, calls = make_operation(expired, expired, 'never')
        authenticator = SSOAuthenticator()

        with patch('asyncio.create_subprocess_exec', login_process()) as spawn:
            with pytest.raises(Exception, match="not found or invalid"):
                await authenticator.run(operation)

        assert len(calls) == 2
        assert spawn.call_count == 1

    @pytest.mark.asyncio
    async def test_failed_login_is_hard_failure(self):
        operation, calls = make_operation(UnauthorizedSSOTokenError(), 'never')
        hooks = RecordingHooks()
        authenticator = SSOAuthenticator()

        with patch('asyncio.create_subprocess_exec', login_process(exit_code=1)):
            with pytest.raises(AuthenticationError) as exc_info:
                await authenticator.run(operation, hooks, profile='dev')

        assert exc_info.value.error_code == '1'
        assert hooks.events == ['attempt', 'failure']
        assert len(calls) == 1

    @pytest.mark.asyncio
    async def test_missing_login_command(self):
        operation, _ = make_operation(UnauthorizedSSOTokenError())
        authenticator = SSOAuthenticator(login_command=['not-a-real-aws-cli', 'sso', 'login'])

        with patch('asyncio.create_subprocess_exec', AsyncMock(side_effect=FileNotFoundError())):
            with pytest.raises(AuthenticationError, match="Login command not found"):
                await authenticator.run(operation)

    @pytest.mark.asyncio
    async def test_custom_login_command(self):
        operation, _ = make_operation(UnauthorizedSSOTokenError(), 'ok')
        authenticator = SSOAuthenticator(login_command=['aws2', 'sso', 'login', '--no-browser'])

        with patch('asyncio.create_subprocess_exec', login_process()) as spawn:
            await authenticator.run(operation, profile='prod')

        spawn.assert_called_once_with('aws2', 'sso', 'login', '--no-browser', '--profile', 'prod')
