"""
Tests for path helpers and target root resolution.
"""
import pytest
from unittest.mock import Mock

from copy_planner.errors import ConfigurationError
from copy_planner.models.config import DATA_PUBLISHER_FINAL_DIR
from copy_planner.services.path_utils import (
    get_path_without_scheme_and_authority,
    get_target_root,
    join_path,
    relativize_path,
    resolve_target_root,
)


class TestPathHelpers:
    """Test cases for scheme stripping, relativizing and joining."""

    @pytest.mark.parametrize('path,expected', [
        ('/data/a', '/data/a'),
        ('s3://bucket/data/a', '/data/a'),
        ('hdfs://namenode:8020/data/a/', '/data/a'),
        ('file:///data/a', '/data/a'),
        ('s3://bucket', '/'),
    ])
    def test_strip_scheme_and_authority(self, path, expected):
        assert get_path_without_scheme_and_authority(path) == expected

    def test_relativize(self):
        assert relativize_path('/data/a/b', '/data') == 'a/b'

    def test_relativize_same_path(self):
        assert relativize_path('/data', '/data') == ''

    def test_relativize_outside_prefix(self):
        with pytest.raises(ConfigurationError):
            relativize_path('/other/a', '/data')

    def test_relativize_sibling_with_common_name_prefix(self):
        with pytest.raises(ConfigurationError):
            relativize_path('/database/a', '/data')

    def test_join_plain_path(self):
        assert join_path('/out', 'a/b') == '/out/a/b'

    def test_join_keeps_scheme(self):
        assert join_path('s3://bucket/out', 'a') == 's3://bucket/out/a'

    def test_join_empty_relative_returns_base(self):
        assert join_path('/out/', '') == '/out/'


class TestResolveTargetRoot:
    """Test cases for resolve_target_root."""

    def test_nested_dataset(self):
        assert resolve_target_root('/out', '/data/a', '/data') == '/out/a'

    def test_same_root_returns_base_exactly(self):
        assert resolve_target_root('/out', '/data', '/data') == '/out'
        assert resolve_target_root('s3://bucket/out', 's3://src/data', 'hdfs://nn/data') == 's3://bucket/out'

    def test_scheme_insensitive(self):
        plain = resolve_target_root('/out', '/data/a/b', '/data')
        with_schemes = resolve_target_root('/out', 'hdfs://nn:8020/data/a/b', 's3://bucket/data')
        assert plain == with_schemes == '/out/a/b'

    def test_get_target_root_requires_publish_dir(self):
        finder = Mock()
        dataset = Mock()

        with pytest.raises(ConfigurationError, match=DATA_PUBLISHER_FINAL_DIR):
            get_target_root({}, finder, dataset)

        finder.common_dataset_root.assert_not_called()

    def test_get_target_root(self):
        finder = Mock()
        finder.common_dataset_root.return_value = 's3://bucket/data'
        dataset = Mock()
        dataset.dataset_root.return_value = 's3://bucket/data/x/y'

        assert get_target_root({DATA_PUBLISHER_FINAL_DIR: '/out'}, finder, dataset) == '/out/x/y'
