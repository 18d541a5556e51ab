"""
Path helpers and target root resolution.

Dataset roots may be URIs (``s3://bucket/data/a``) while the publish directory
lives on another store, so only the path component takes part in
relativization.
"""
import posixpath
from typing import Mapping
from urllib.parse import urlsplit, urlunsplit

from loguru import logger

from ..errors import ConfigurationError
from ..models.config import DATA_PUBLISHER_FINAL_DIR


def get_path_without_scheme_and_authority(path: str) -> str:
    """Return the path component of ``path``, e.g. ``s3://bucket/a/b`` -> ``/a/b``."""
    parts = urlsplit(path)
    stripped = parts.path if parts.scheme else path
    if not stripped:
        return '/'
    normalized = posixpath.normpath(stripped)
    # normpath keeps a leading double slash
    if normalized.startswith('//'):
        normalized = '/' + normalized.lstrip('/')
    return normalized


def relativize_path(full_path: str, prefix: str) -> str:
    """
    Path of ``full_path`` relative to ``prefix``; ``""`` when they are equal.

    Raises:
        ConfigurationError: If ``full_path`` is not under ``prefix``
    """
    if full_path == prefix:
        return ''
    relative = posixpath.relpath(full_path, prefix)
    if relative == '.':
        return ''
    if relative == '..' or relative.startswith('../'):
        raise ConfigurationError(f"Path {full_path} is not under common root {prefix}")
    return relative


def join_path(base: str, relative: str) -> str:
    """Append ``relative`` to ``base``, keeping any scheme and authority on ``base``."""
    if not relative:
        return base
    parts = urlsplit(base)
    if parts.scheme:
        joined = posixpath.join(parts.path or '/', relative)
        return urlunsplit((parts.scheme, parts.netloc, joined, parts.query, parts.fragment))
    return posixpath.join(base, relative)


def resolve_target_root(base_publish_dir: str, dataset_root: str, common_dataset_root: str) -> str:
    """Mirror the dataset's position under the common root beneath the publish dir."""
    relative = relativize_path(
        get_path_without_scheme_and_authority(dataset_root),
        get_path_without_scheme_and_authority(common_dataset_root)
    )
    return join_path(base_publish_dir, relative)


def require_publish_dir(properties: Mapping[str, str]) -> str:
    """
    Raises:
        ConfigurationError: If the publish directory property is missing
    """
    if DATA_PUBLISHER_FINAL_DIR not in properties:
        raise ConfigurationError(f"Missing property {DATA_PUBLISHER_FINAL_DIR}")
    return properties[DATA_PUBLISHER_FINAL_DIR]


def get_target_root(properties: Mapping[str, str], dataset_finder, dataset) -> str:
    """Resolve the target root of ``dataset`` from job properties and the finder's common root."""
    base_path = require_publish_dir(properties)
    try:
        target_root = resolve_target_root(base_path, dataset.dataset_root(), dataset_finder.common_dataset_root())
    except ConfigurationError as e:
        e.dataset = dataset.dataset_root()
        raise
    logger.debug(f"Resolved target root {target_root} for dataset {dataset.dataset_root()}")
    return target_root
