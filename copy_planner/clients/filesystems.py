"""
Filesystem clients used by datasets to inspect the source and target stores.

Planning only reads from stores: listing, stat and glob.
"""
import fnmatch
import glob as globlib
import posixpath
import time
from dataclasses import dataclass
from pathlib import Path
from typing import Iterator, List, Optional
from urllib.parse import urlsplit

import boto3
from botocore.exceptions import ClientError, EndpointConnectionError
from loguru import logger

from ..models.config import LOCAL_FS_URI, S3Config


@dataclass(frozen=True)
class FileStatus:
    """Represents a file on a store."""
    path: str
    size: int
    modification_time: int  # epoch millis
    etag: Optional[str] = None


class FileSystem:
    """Read-only view of a store."""

    scheme = ''

    def get_file_status(self, path: str) -> Optional[FileStatus]:
        raise NotImplementedError

    def list_files(self, root: str) -> Iterator[FileStatus]:
        raise NotImplementedError

    def glob(self, pattern: str) -> List[str]:
        raise NotImplementedError

    def exists(self, path: str) -> bool:
        return self.get_file_status(path) is not None


class LocalFileSystem(FileSystem):
    """Local disk, addressed by absolute POSIX paths."""

    scheme = 'file'

    @staticmethod
    def _local_path(path: str) -> Path:
        parts = urlsplit(path)
        return Path(parts.path if parts.scheme == 'file' else path)

    def get_file_status(self, path: str) -> Optional[FileStatus]:
        local_path = self._local_path(path)
        if not local_path.is_file():
            return None
        stat = local_path.stat()
        return FileStatus(path=str(local_path), size=stat.st_size, modification_time=int(stat.st_mtime * 1000))

    def list_files(self, root: str) -> Iterator[FileStatus]:
        """
        List all files under ``root`` recursively, sorted by path.

        A ``root`` naming a file lists that file alone.

        Raises:
            FileNotFoundError: If ``root`` does not exist
        """
        root_path = self._local_path(root)
        if not root_path.exists():
            raise FileNotFoundError(f"Dataset root not found: {root}")
        if root_path.is_file():
            yield self.get_file_status(str(root_path))
            return
        for file_path in sorted(p for p in root_path.rglob('*') if p.is_file()):
            status = self.get_file_status(str(file_path))
            if status is not None:
                yield status

    def glob(self, pattern: str) -> List[str]:
        return sorted(globlib.glob(str(self._local_path(pattern))))


class S3FileSystem(FileSystem):
    """One S3 bucket, addressed by ``s3://bucket/key`` URIs."""

    scheme = 's3'

    def __init__(self, bucket: str, config: S3Config):
        self.bucket = bucket
        self.config = config
        self.client = self._create_s3_client(config)
        logger.info(f"S3FileSystem initialized for bucket: {bucket}")

    def _create_s3_client(self, config: S3Config):
        """Create an S3 client from configuration."""
        try:
            client = boto3.client(
                's3',
                endpoint_url=config.endpoint or None,
                aws_access_key_id=config.access_key or None,
                aws_secret_access_key=config.secret_key or None,
                region_name=config.region or 'us-east-1'
            )
            logger.debug(f"Created S3 client for endpoint: {config.endpoint}")
            return client
        except Exception as e:
            logger.error(f"Failed to create S3 client for {config.endpoint}: {e}")
            raise

    def _retry_operation(self, operation, max_retries: int = 3, backoff_factor: float = 1.0):
        """Execute a read with exponential backoff retry logic."""
        for attempt in range(max_retries):
            try:
                return operation()
            except (ClientError, EndpointConnectionError) as e:
                if attempt == max_retries - 1:
                    logger.error(f"Operation failed after {max_retries} attempts: {e}")
                    raise

                wait_time = backoff_factor * (2 ** attempt)
                logger.warning(f"Operation failed (attempt {attempt + 1}/{max_retries}), retrying in {wait_time}s: {e}")
                time.sleep(wait_time)

    def _key(self, path: str) -> str:
        parts = urlsplit(path)
        if parts.scheme and parts.netloc != self.bucket:
            raise ValueError(f"Path {path} is not in bucket {self.bucket}")
        return (parts.path if parts.scheme else path).lstrip('/')

    def _uri(self, key: str) -> str:
        return f"s3://{self.bucket}/{key}"

    def _list_keys(self, prefix: str) -> List[dict]:
        def _list_operation():
            paginator = self.client.get_paginator('list_objects_v2')
            objects = []
            for page in paginator.paginate(Bucket=self.bucket, Prefix=prefix):
                objects.extend(page.get('Contents', []))
            return objects

        return self._retry_operation(_list_operation)

    def get_file_status(self, path: str) -> Optional[FileStatus]:
        key = self._key(path)

        def _head_operation():
            try:
                return self.client.head_object(Bucket=self.bucket, Key=key)
            except ClientError as e:
                if e.response['Error']['Code'] in ('404', 'NoSuchKey'):
                    return None
                raise

        response = self._retry_operation(_head_operation)
        if response is None:
            return None
        return FileStatus(
            path=self._uri(key),
            size=response['ContentLength'],
            modification_time=int(response['LastModified'].timestamp() * 1000),
            etag=response['ETag'].strip('"')
        )

    def list_files(self, root: str) -> Iterator[FileStatus]:
        """
        List all objects under ``root``.

        A ``root`` naming an object lists that object alone.

        Yields:
            FileStatus: Objects under the prefix, in key order
        """
        root_key = self._key(root).rstrip('/')
        directory_prefix = f"{root_key}/" if root_key else ''
        for obj in self._list_keys(root_key):
            key = obj['Key']
            if key.endswith('/') or not (key == root_key or key.startswith(directory_prefix)):
                continue
            yield FileStatus(
                path=self._uri(obj['Key']),
                size=obj['Size'],
                modification_time=int(obj['LastModified'].timestamp() * 1000),
                etag=obj['ETag'].strip('"')
            )

    def glob(self, pattern: str) -> List[str]:
        """Match ``pattern`` against every directory prefix and key in the bucket."""
        key_pattern = self._key(pattern).rstrip('/')
        static_prefix = key_pattern.split('*', 1)[0].split('?', 1)[0].split('[', 1)[0]
        candidates = set()
        for obj in self._list_keys(static_prefix):
            key = obj['Key'].rstrip('/')
            while key:
                candidates.add(key)
                key = posixpath.dirname(key)
        depth = key_pattern.count('/')
        return sorted(
            self._uri(candidate) for candidate in candidates
            if candidate.count('/') == depth and fnmatch.fnmatchcase(candidate, key_pattern)
        )


def get_file_system(uri: str = LOCAL_FS_URI, s3_config: Optional[S3Config] = None) -> FileSystem:
    """
    Build the FileSystem for a store URI.

    Raises:
        ValueError: If the scheme is not supported
    """
    parts = urlsplit(uri)
    if parts.scheme in ('', 'file'):
        return LocalFileSystem()
    if parts.scheme in ('s3', 's3a'):
        return S3FileSystem(parts.netloc, s3_config or S3Config.from_env())
    raise ValueError(f"Unsupported filesystem scheme: {parts.scheme}")
