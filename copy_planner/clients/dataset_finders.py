"""
Dataset discovery: dataset finders and the datasets they return.
"""
import importlib
import posixpath
import re
from typing import List, Mapping, Optional

from loguru import logger

from ..errors import ConfigurationError
from ..models.config import CopyConfiguration, DATASET_PATTERN_KEY, DATASET_PROFILE_CLASS_KEY
from ..models.data_models import CopyableFile
from ..services.path_utils import get_path_without_scheme_and_authority, join_path, relativize_path
from .filesystems import FileSystem

_GLOB_CHARS = re.compile(r'[*?\[{]')


class CopyableDataset:
    """A source-rooted collection of files to copy."""

    def dataset_root(self) -> str:
        raise NotImplementedError

    def get_copyable_files(self, target_fs: FileSystem, copy_configuration: CopyConfiguration) -> List[CopyableFile]:
        """
        Files that still need copying under ``copy_configuration``.

        Raises:
            OSError: If a store cannot be read
        """
        raise NotImplementedError


class DatasetFinder:
    """Discovers the datasets of one copy job."""

    def find_datasets(self) -> List[CopyableDataset]:
        raise NotImplementedError

    def common_dataset_root(self) -> str:
        """Deepest path that is an ancestor of every dataset root."""
        raise NotImplementedError


class RecursiveCopyableDataset(CopyableDataset):
    """
    Every file below a root directory, mirrored under the target root.

    A file is skipped when another dataset of the same run already claimed it,
    or when a file of the same size already sits at its destination. Files are
    grouped by their parent directory.
    """

    def __init__(self, fs: FileSystem, root: str):
        self.fs = fs
        self.root = root

    def dataset_root(self) -> str:
        return self.root

    def get_copyable_files(self, target_fs: FileSystem, copy_configuration: CopyConfiguration) -> List[CopyableFile]:
        copy_context = copy_configuration.copy_context
        root_path = get_path_without_scheme_and_authority(self.root)
        files = []
        for status in self.fs.list_files(self.root):
            origin_path = get_path_without_scheme_and_authority(status.path)
            relative = relativize_path(origin_path, root_path)
            destination = join_path(copy_configuration.target_root, relative)

            if not copy_context.claim(status.path):
                logger.debug(f"Skipping {status.path}: already planned by another dataset")
                continue

            existing = copy_context.get_file_status(destination, target_fs.get_file_status)
            if existing is not None and existing.size == status.size:
                logger.debug(f"Skipping {status.path}: already present at {destination}")
                continue

            files.append(CopyableFile(
                origin_path=status.path,
                destination_path=destination,
                file_set=posixpath.dirname(origin_path),
                origin_size=status.size,
                origin_modification_time=status.modification_time,
                checksum=status.etag,
                preserve=copy_configuration.preserve,
                origin_timestamp=status.modification_time,
                upstream_timestamp=status.modification_time
            ))
        logger.debug(f"Dataset {self.root}: {len(files)} copyable files")
        return files

    def __repr__(self) -> str:
        return f"RecursiveCopyableDataset({self.root!r})"


def deepest_non_glob_path(pattern: str) -> str:
    """``/data/*/x`` -> ``/data``; a pattern without glob characters is returned unchanged."""
    match = _GLOB_CHARS.search(pattern)
    if match is None:
        return pattern.rstrip('/') or '/'
    return posixpath.dirname(pattern[:match.start()]).rstrip('/') or '/'


class GlobDatasetFinder(DatasetFinder):
    """One RecursiveCopyableDataset per path matching ``gobblin.dataset.pattern``."""

    def __init__(self, fs: FileSystem, properties: Mapping[str, str]):
        if DATASET_PATTERN_KEY not in properties:
            raise ConfigurationError(f"Missing property {DATASET_PATTERN_KEY}")
        self.fs = fs
        self.pattern = properties[DATASET_PATTERN_KEY]

    def find_datasets(self) -> List[CopyableDataset]:
        matches = self.fs.glob(self.pattern)
        logger.info(f"Found {len(matches)} datasets matching {self.pattern}")
        return [RecursiveCopyableDataset(self.fs, match) for match in matches]

    def common_dataset_root(self) -> str:
        return deepest_non_glob_path(self.pattern)


DEFAULT_DATASET_PROFILE_CLASS = f"{GlobDatasetFinder.__module__}.{GlobDatasetFinder.__qualname__}"


def instantiate_dataset_finder(properties: Mapping[str, str], fs: FileSystem,
                               default_class: Optional[str] = None) -> DatasetFinder:
    """
    Build the finder named by ``gobblin.dataset.profile.class``.

    The class is called with ``(fs, properties)``.

    Raises:
        ConfigurationError: If the class cannot be loaded
    """
    class_path = properties.get(DATASET_PROFILE_CLASS_KEY, default_class or DEFAULT_DATASET_PROFILE_CLASS)
    module_name, _, class_name = class_path.rpartition('.')
    try:
        finder_class = getattr(importlib.import_module(module_name), class_name)
    except (ImportError, AttributeError, ValueError) as e:
        raise ConfigurationError(f"Cannot load dataset finder class {class_path}: {e}") from e
    logger.debug(f"Instantiating dataset finder {class_path}")
    return finder_class(fs, properties)
