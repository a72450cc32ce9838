"""
Tests for the resource cache.
"""

from resource_picker.models.resource import ResourceList, is_from_cache
from resource_picker.services.cache import ResourceCache
from tests.fakes import make_resource


class TestResourceCache:

    def test_set_then_get_is_tagged(self):
        cache = ResourceCache()
        resources = [make_resource('A'), make_resource('B')]

        cache.set('us-east-1', 'dev', resources)
        cached = cache.get('us-east-1', 'dev')

        assert isinstance(cached, ResourceList)
        assert is_from_cache(cached)
        assert list(cached) == resources

    def test_other_keys_are_absent(self):
        cache = ResourceCache()
        cache.set('us-east-1', 'dev', [make_resource('A')])

        assert cache.get('us-west-2', 'dev') is None
        assert cache.get('us-east-1', 'prod') is None

    def test_missing_profile_uses_empty_key(self):
        cache = ResourceCache()
        cache.set('us-east-1', None, [make_resource('A')])

        assert cache.get('us-east-1', '') is not None

    def test_stored_list_is_a_copy(self):
        cache = ResourceCache()
        resources = [make_resource('A')]
        cache.set('us-east-1', 'dev', resources)

        resources.append(make_resource('B'))

        assert len(cache.get('us-east-1', 'dev')) == 1

    def test_clear(self):
        cache = ResourceCache()
        cache.set('us-east-1', 'dev', [])
        assert len(cache) == 1

        cache.clear()

        assert len(cache) == 0
        assert cache.get('us-east-1', 'dev') is None

    def test_fresh_lists_are_untagged(self):
        assert not is_from_cache(ResourceList([make_resource('A')]))
        assert not is_from_cache([make_resource('A')])
