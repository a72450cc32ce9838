"""
Tests for cache-first resource loading.
"""

from unittest.mock import AsyncMock

import pytest
from botocore.exceptions import ClientError, EndpointConnectionError

from resource_picker.models.exceptions import AuthenticationError, AWSCredentialsError, ResourceLoadError
from resource_picker.models.resource import Resource, is_from_cache
from resource_picker.services.auth import SSOAuthenticator
from resource_picker.services.cache import ResourceCache
from resource_picker.services.loader import LoadOptions, ResourceLoader, ResourceLoaderDefinition


class FakeDefinition(ResourceLoaderDefinition):
    """Enumerates pages of names; the pages can change between calls."""

    service_name = 'fake'
    operation_name = 'list_things'

    def __init__(self, *pages, error=None):
        self.pages = list(pages)
        self.error = error
        self.init_calls = []

    def init(self, options):
        self.init_calls.append(options)
        return object()

    def enumerate(self, client, options):
        if self.error is not None:
            raise self.error
        for page in self.pages:
            yield from page

    def map(self, item, region):
        return Resource(name=item, description=region, url=f"https://{region}.example.com/{item}")


def client_error(code, message='denied'):
    return ClientError({'Error': {'Code': code, 'Message': message}}, 'ListThings')


class TestResourceLoader:

    @pytest.mark.asyncio
    async def test_enumerates_all_pages(self):
        definition = FakeDefinition(['a', 'b'], ['c'])
        loader = ResourceLoader(definition)

        resources = await loader(LoadOptions(region='eu-west-1', profile='dev'))

        assert [r.name for r in resources] == ['a', 'b', 'c']
        assert resources[0].url == 'https://eu-west-1.example.com/a'
        assert not is_from_cache(resources)
        assert definition.init_calls[0].region == 'eu-west-1'

    @pytest.mark.asyncio
    async def test_second_load_is_served_from_cache(self):
        definition = FakeDefinition(['a'])
        loader = ResourceLoader(definition)
        options = LoadOptions(region='eu-west-1', profile='dev')

        await loader(options)
        definition.pages = [['a', 'b']]
        resources = await loader(options)

        assert is_from_cache(resources)
        assert [r.name for r in resources] == ['a']
        assert len(definition.init_calls) == 1

    @pytest.mark.asyncio
    async def test_skip_cache_refetches_and_updates_cache(self):
        definition = FakeDefinition(['a'])
        cache = ResourceCache()
        loader = ResourceLoader(definition, cache=cache)

        await loader(LoadOptions(region='eu-west-1', profile='dev'))
        definition.pages = [['a', 'b']]
        resources = await loader(LoadOptions(region='eu-west-1', profile='dev', skip_cache=True))

        assert not is_from_cache(resources)
        assert [r.name for r in resources] == ['a', 'b']
        assert [r.name for r in cache.get('eu-west-1', 'dev')] == ['a', 'b']

    @pytest.mark.asyncio
    async def test_cache_is_keyed_by_profile_and_region(self):
        definition = FakeDefinition(['a'])
        loader = ResourceLoader(definition)

        await loader(LoadOptions(region='eu-west-1', profile='dev'))
        resources = await loader(LoadOptions(region='eu-west-1', profile='prod'))

        assert not is_from_cache(resources)
        assert len(definition.init_calls) == 2

    @pytest.mark.asyncio
    async def test_client_error_becomes_load_error(self):
        loader = ResourceLoader(FakeDefinition(error=client_error('ThrottlingException', 'Rate exceeded')))

        with pytest.raises(ResourceLoadError) as exc_info:
            await loader(LoadOptions(region='eu-west-1'))

        assert exc_info.value.error_code == 'ThrottlingException'
        assert str(exc_info.value) == 'ThrottlingException: Rate exceeded'

    @pytest.mark.asyncio
    async def test_access_denied_becomes_credentials_error(self):
        loader = ResourceLoader(FakeDefinition(error=client_error('AccessDeniedException')))

        with pytest.raises(AWSCredentialsError):
            await loader(LoadOptions(region='eu-west-1'))

    @pytest.mark.asyncio
    async def test_network_error_becomes_load_error(self):
        error = EndpointConnectionError(endpoint_url='https://fake.eu-west-1.amazonaws.com')
        loader = ResourceLoader(FakeDefinition(error=error))

        with pytest.raises(ResourceLoadError, match="Network error"):
            await loader(LoadOptions(region='eu-west-1'))

    @pytest.mark.asyncio
    async def test_failed_load_is_not_cached(self):
        definition = FakeDefinition(error=client_error('ThrottlingException'))
        cache = ResourceCache()
        loader = ResourceLoader(definition, cache=cache)

        with pytest.raises(ResourceLoadError):
            await loader(LoadOptions(region='eu-west-1'))

        assert len(cache) == 0

    @pytest.mark.asyncio
    async def test_expired_session_is_retried_after_login(self):
        definition = FakeDefinition(['a'], error=Exception("Error loading SSO Token: Token for dev does not exist"))
        authenticator = SSOAuthenticator()

        async def login(profile):
            definition.error = None

        authenticator.login = AsyncMock(side_effect=login)
        loader = ResourceLoader(definition, authenticator=authenticator)

        resources = await loader(LoadOptions(region='eu-west-1', profile='dev'))

        assert [r.name for r in resources] == ['a']
        authenticator.login.assert_awaited_once_with('dev')

    @pytest.mark.asyncio
    async def test_failed_login_propagates(self):
        definition = FakeDefinition(error=Exception("The SSO session associated with this profile is invalid"))
        authenticator = SSOAuthenticator()
        authenticator.login = AsyncMock(side_effect=AuthenticationError("aws sso login exited with code 255"))
        loader = ResourceLoader(definition, authenticator=authenticator)

        with pytest.raises(AuthenticationError):
            await loader(LoadOptions(region='eu-west-1', profile='dev'))
