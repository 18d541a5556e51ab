"""
Tests for filesystem clients.
"""
import pytest
from datetime import datetime, timezone
from unittest.mock import Mock, patch
from botocore.exceptions import ClientError

from copy_planner.clients.filesystems import LocalFileSystem, S3FileSystem, get_file_system
from copy_planner.models.config import S3Config


@pytest.fixture
def s3_config():
    """Create a test S3 configuration."""
    return S3Config(endpoint='http://localhost:9000', access_key='key', secret_key='secret')


@pytest.fixture
def s3_fs(s3_config):
    """Create a test S3FileSystem instance with mocked client."""
    with patch('copy_planner.clients.filesystems.boto3.client') as mock_boto3:
        mock_boto3.return_value = Mock()
        return S3FileSystem('source-bucket', s3_config)


def s3_object(key, size=10):
    return {
        'Key': key,
        'Size': size,
        'LastModified': datetime(2024, 1, 1, tzinfo=timezone.utc),
        'ETag': '"etag-' + key + '"'
    }


def set_listing(s3_fs, objects):
    paginator = Mock()
    paginator.paginate.return_value = [{'Contents': objects}]
    s3_fs.client.get_paginator.return_value = paginator
    return paginator


class TestLocalFileSystem:
    """Test cases for LocalFileSystem."""

    def test_list_files(self, tmp_path):
        (tmp_path / 'b').mkdir()
        (tmp_path / 'a.txt').write_text('hello')
        (tmp_path / 'b' / 'c.txt').write_text('x')
        fs = LocalFileSystem()

        files = list(fs.list_files(str(tmp_path)))

        assert [f.path for f in files] == [str(tmp_path / 'a.txt'), str(tmp_path / 'b' / 'c.txt')]
        assert files[0].size == 5

    def test_list_files_of_file_root(self, tmp_path):
        (tmp_path / 'a.csv').write_text('1,2\n')

        files = list(LocalFileSystem().list_files(str(tmp_path / 'a.csv')))

        assert [f.path for f in files] == [str(tmp_path / 'a.csv')]
        assert files[0].size == 4

    def test_list_missing_root(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            list(LocalFileSystem().list_files(str(tmp_path / 'missing')))

    def test_file_status(self, tmp_path):
        (tmp_path / 'a.txt').write_text('abc')
        fs = LocalFileSystem()

        assert fs.get_file_status(str(tmp_path / 'a.txt')).size == 3
        assert fs.get_file_status(f"file://{tmp_path / 'a.txt'}").size == 3
        assert fs.get_file_status(str(tmp_path / 'missing')) is None
        assert fs.get_file_status(str(tmp_path)) is None
        assert fs.exists(str(tmp_path / 'a.txt'))

    def test_glob(self, tmp_path):
        for name in ['x1', 'x2', 'y1']:
            (tmp_path / name).mkdir()

        assert LocalFileSystem().glob(str(tmp_path / 'x*')) == [str(tmp_path / 'x1'), str(tmp_path / 'x2')]


class TestS3FileSystem:
    """Test cases for S3FileSystem."""

    def test_initialization(self, s3_config):
        with patch('copy_planner.clients.filesystems.boto3.client') as mock_boto3:
            mock_boto3.return_value = Mock()

            fs = S3FileSystem('source-bucket', s3_config)

            assert fs.bucket == 'source-bucket'
            assert mock_boto3.call_count == 1

    def test_list_files(self, s3_fs):
        paginator = set_listing(s3_fs, [s3_object('data/a/f1'), s3_object('data/a/sub/'), s3_object('data/a/f2', 20)])

        files = list(s3_fs.list_files('s3://source-bucket/data/a'))

        assert [f.path for f in files] == ['s3://source-bucket/data/a/f1', 's3://source-bucket/data/a/f2']
        assert files[1].size == 20
        assert files[0].etag == 'etag-data/a/f1'
        paginator.paginate.assert_called_once_with(Bucket='source-bucket', Prefix='data/a')

    def test_list_files_skips_sibling_prefixes(self, s3_fs):
        set_listing(s3_fs, [s3_object('data/a/f1'), s3_object('data/ab/f2'), s3_object('data/a.csv')])

        files = list(s3_fs.list_files('s3://source-bucket/data/a'))

        assert [f.path for f in files] == ['s3://source-bucket/data/a/f1']

    def test_list_files_of_object_root(self, s3_fs):
        set_listing(s3_fs, [s3_object('data/a.csv', 7), s3_object('data/a.csv.bak')])

        files = list(s3_fs.list_files('s3://source-bucket/data/a.csv'))

        assert [f.path for f in files] == ['s3://source-bucket/data/a.csv']
        assert files[0].size == 7

    def test_file_status(self, s3_fs):
        s3_fs.client.head_object.return_value = {
            'ContentLength': 1024,
            'LastModified': datetime(2024, 1, 1, tzinfo=timezone.utc),
            'ETag': '"abc123"'
        }

        status = s3_fs.get_file_status('s3://source-bucket/data/a/f1')

        assert status.size == 1024
        assert status.etag == 'abc123'
        assert status.modification_time == 1704067200000
        s3_fs.client.head_object.assert_called_once_with(Bucket='source-bucket', Key='data/a/f1')

    def test_file_status_missing(self, s3_fs):
        s3_fs.client.head_object.side_effect = ClientError({'Error': {'Code': '404'}}, 'HeadObject')

        with patch('copy_planner.clients.filesystems.time.sleep'):
            assert s3_fs.get_file_status('data/missing') is None

    def test_file_status_access_denied(self, s3_fs):
        s3_fs.client.head_object.side_effect = ClientError({'Error': {'Code': '403'}}, 'HeadObject')

        with patch('copy_planner.clients.filesystems.time.sleep'):
            with pytest.raises(ClientError):
                s3_fs.get_file_status('data/secret')

    def test_retry_then_succeed(self, s3_fs):
        s3_fs.client.head_object.side_effect = [
            ClientError({'Error': {'Code': '500'}}, 'HeadObject'),
            {'ContentLength': 1, 'LastModified': datetime(2024, 1, 1, tzinfo=timezone.utc), 'ETag': '"e"'}
        ]

        with patch('copy_planner.clients.filesystems.time.sleep') as mock_sleep:
            status = s3_fs.get_file_status('data/f')

        assert status.size == 1
        mock_sleep.assert_called_once_with(1.0)

    def test_other_bucket_rejected(self, s3_fs):
        with pytest.raises(ValueError):
            s3_fs.get_file_status('s3://other-bucket/key')

    def test_glob(self, s3_fs):
        set_listing(s3_fs, [s3_object('data/a/f1'), s3_object('data/b/x/f2'), s3_object('data/c')])

        matches = s3_fs.glob('s3://source-bucket/data/*')

        assert matches == ['s3://source-bucket/data/a', 's3://source-bucket/data/b', 's3://source-bucket/data/c']


class TestGetFileSystem:
    """Test cases for get_file_system."""

    def test_local(self):
        assert isinstance(get_file_system('file:///'), LocalFileSystem)
        assert isinstance(get_file_system('/tmp'), LocalFileSystem)

    def test_s3(self, s3_config):
        with patch('copy_planner.clients.filesystems.boto3.client'):
            fs = get_file_system('s3://my-bucket/', s3_config)
        assert isinstance(fs, S3FileSystem)
        assert fs.bucket == 'my-bucket'

    def test_unsupported(self):
        with pytest.raises(ValueError, match='ftp'):
            get_file_system('ftp://host/')
