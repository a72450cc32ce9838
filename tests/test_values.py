"""
Tests for parameter and secret value access and the value menu.
"""

import boto3
import pytest
from botocore.exceptions import ClientError
from moto import mock_aws

from resource_picker.models.exceptions import ResourceCreationError, ResourceLoadError
from resource_picker.models.resource import Resource
from resource_picker.services.values import (
    SecretsManagerRepository,
    SSMParameterRepository,
    ValueSecrecy,
    show_value_menu,
    validate_json,
)
from tests.fakes import FakePickUI, FakeRepository


def client_error(code, message):
    return ClientError({'Error': {'Code': code, 'Message': message}}, 'Operation')


@pytest.fixture
def secret():
    return Resource(
        name='db-pass',
        description='',
        url='https://console.example.com/db-pass',
        arn='arn:aws:secretsmanager:us-east-1:123456789012:secret:db-pass-AbCdEf',
    )


@pytest.fixture
def parameter():
    return Resource(name='/app/db', description='String', url='https://console.example.com/app/db')


class TestValidateJson:

    def test_plain_text_is_accepted(self):
        assert validate_json('hello') is None

    def test_valid_object_is_accepted(self):
        assert validate_json('{"user": "admin"}') is None

    def test_invalid_object_is_rejected(self):
        assert validate_json('  {"user": ').startswith("Invalid JSON")


class TestBaseValueRepository:

    @pytest.mark.asyncio
    async def test_client_error_on_create(self):
        repository = FakeRepository()

        def fail(*args):
            raise client_error('ParameterAlreadyExists', 'The parameter already exists.')
        repository._create = fail

        with pytest.raises(ResourceCreationError) as exc_info:
            await repository.create_value('/a', 'v', ValueSecrecy.SECRET)

        assert exc_info.value.error_code == 'ParameterAlreadyExists'

    @pytest.mark.asyncio
    async def test_client_error_on_retrieve(self):
        repository = FakeRepository(retrieve_error=client_error('ParameterNotFound', 'missing'))

        with pytest.raises(ResourceLoadError, match="ParameterNotFound - missing"):
            await repository.retrieve_value()


class TestShowValueMenu:

    @pytest.mark.asyncio
    async def test_show_value(self, secret):
        ui = FakePickUI(picks=['Show value'])
        shown = []

        result = await show_value_menu(ui, secret, 'secret', FakeRepository(), output=shown.append)

        assert result.finished
        assert shown == ['s3cr3t']

    @pytest.mark.asyncio
    async def test_show_arn(self, secret):
        ui = FakePickUI(picks=['Show ARN'])
        shown = []

        await show_value_menu(ui, secret, 'secret', FakeRepository(), output=shown.append)

        assert shown == [secret.arn]

    @pytest.mark.asyncio
    async def test_arn_action_hidden_without_arn(self, parameter):
        ui = FakePickUI(picks=['Show name'])
        shown = []

        await show_value_menu(ui, parameter, 'parameter', FakeRepository(), output=shown.append)

        assert ui.pick_prompts[0] == ['Show value', 'Show name', 'Open in AWS console...', 'Edit value...']
        assert shown == ['/app/db']

    @pytest.mark.asyncio
    async def test_cancel_is_unfinished(self, secret):
        ui = FakePickUI(picks=[None])

        result = await show_value_menu(ui, secret, 'secret', FakeRepository(), output=lambda _: None)

        assert not result.finished

    @pytest.mark.asyncio
    async def test_open_in_console(self, secret):
        ui = FakePickUI(picks=['Open in AWS console...'])

        result = await show_value_menu(ui, secret, 'secret', FakeRepository())

        assert result.finished
        assert ui.opened_urls == [secret.url]

    @pytest.mark.asyncio
    async def test_edit_value(self, secret):
        ui = FakePickUI(picks=['Edit value...'], inputs=['{"broken"', '{"user": "admin"}'])
        repository = FakeRepository()

        result = await show_value_menu(ui, secret, 'secret', repository)

        assert result.finished
        assert repository.updates == ['{"user": "admin"}']
        assert ui.input_prompts[0]['initial_value'] == 's3cr3t'
        assert ui.validation_messages[0].startswith("Invalid JSON")

    @pytest.mark.asyncio
    async def test_cancelled_edit_returns_to_menu(self, secret):
        ui = FakePickUI(picks=['Edit value...', None])
        repository = FakeRepository()

        result = await show_value_menu(ui, secret, 'secret', repository)

        assert not result.finished
        assert repository.updates == []
        assert len(ui.pick_prompts) == 2

    @pytest.mark.asyncio
    async def test_failed_update_shows_error(self, secret):
        ui = FakePickUI(picks=['Edit value...', None], inputs=['new'])
        repository = FakeRepository(update_error=client_error('AccessDeniedException', 'nope'))

        await show_value_menu(ui, secret, 'secret', repository)

        assert ui.errors == ["Failed to store secret: AccessDeniedException - nope"]

    @pytest.mark.asyncio
    async def test_unreadable_value(self, secret):
        ui = FakePickUI(picks=['Show value', None])
        repository = FakeRepository(retrieve_error=client_error('AccessDeniedException', 'nope'))

        result = await show_value_menu(ui, secret, 'secret', repository, output=lambda _: None)

        assert not result.finished
        assert ui.errors == ["Nothing to show"]


@pytest.fixture
def session(aws_credentials):
    with mock_aws():
        yield boto3.Session(region_name='us-east-1')


class TestSSMParameterRepository:

    @pytest.mark.asyncio
    async def test_create_retrieve_update(self, session):

        await SSMParameterRepository(session).create_value('/app/db', 'one', ValueSecrecy.SECRET)
        repository = SSMParameterRepository(session, '/app/db')
        assert await repository.retrieve_value() == 'one'

        await repository.update_value('two')
        assert await repository.retrieve_value() == 'two'

        parameter = session.client('ssm').get_parameter(Name='/app/db')['Parameter']
        assert parameter['Type'] == 'SecureString'

    @pytest.mark.asyncio
    async def test_create_existing_fails(self, session):
        session.client('ssm').put_parameter(Name='/app/db', Value='x', Type='String')

        with pytest.raises(ResourceCreationError):
            await SSMParameterRepository(session).create_value('/app/db', 'y', ValueSecrecy.NOT_SECRET)

    @pytest.mark.asyncio
    async def test_retrieve_missing_fails(self, session):

        with pytest.raises(ResourceLoadError):
            await SSMParameterRepository(session, '/missing').retrieve_value()


class TestSecretsManagerRepository:

    @pytest.mark.asyncio
    async def test_create_retrieve_update(self, session):

        await SecretsManagerRepository(session).create_value('db-pass', 'one', ValueSecrecy.SECRET)
        repository = SecretsManagerRepository(session, 'db-pass')
        assert await repository.retrieve_value() == 'one'

        await repository.update_value('two')
        assert await repository.retrieve_value() == 'two'

    @pytest.mark.asyncio
    async def test_create_existing_fails(self, session):
        session.client('secretsmanager').create_secret(Name='db-pass', SecretString='x')

        with pytest.raises(ResourceCreationError):
            await SecretsManagerRepository(session).create_value('db-pass', 'y', ValueSecrecy.SECRET)
