"""
Work unit planner for copy jobs.
"""
from concurrent.futures import ThreadPoolExecutor
from typing import Callable, List, Mapping, Optional, Tuple

from botocore.exceptions import BotoCoreError, ClientError
from loguru import logger

from ..clients.dataset_finders import (
    DEFAULT_DATASET_PROFILE_CLASS,
    CopyableDataset,
    DatasetFinder,
    instantiate_dataset_finder,
)
from ..clients.filesystems import FileSystem, get_file_system
from ..errors import ConfigurationError, DiscoveryError, SerializationError
from ..models.config import (
    COPY_PREFIX,
    LOCAL_FS_URI,
    PLANNER_THREADS_KEY,
    SOURCE_FILEBASED_FS_URI,
    WRITER_FILE_SYSTEM_URI,
    CopyConfiguration,
)
from ..models.copy_context import CopyContext
from ..models.data_models import CopyableDatasetMetadata, CopyableFile
from ..models.work_unit import (
    DATASET_ROOT_METADATA_NAME,
    DATASET_URN_KEY,
    SERIALIZED_COPYABLE_DATASET,
    SERIALIZED_COPYABLE_FILE,
    SLA_DATASET_URN_KEY,
    SLA_PARTITION_KEY,
    Extract,
    TableType,
    WorkUnit,
    add_custom_tag,
)
from .guid import compute_work_unit_guid, set_work_unit_guid
from .partitioner import partition_copyable_files
from .path_utils import get_target_root, require_publish_dir

# Store failures that abort discovery
STORE_ERRORS = (OSError, ClientError, BotoCoreError)

FinderFactory = Callable[[Mapping[str, str], FileSystem], DatasetFinder]


class CopySource:
    """
    Plans one work unit per file to copy.

    For every dataset the finder returns: resolve the dataset's target root,
    list its copyable files under a configuration sharing one CopyContext,
    partition them by file set, and emit one work unit per file. All work
    units of a partition share one Extract.

    One work unit is created per copyable file even though the execution
    layer can handle several files per work unit.
    """

    def __init__(
        self,
        properties: Mapping[str, str],
        finder_factory: Optional[FinderFactory] = None,
        source_fs: Optional[FileSystem] = None,
        target_fs: Optional[FileSystem] = None,
        max_workers: Optional[int] = None
    ):
        """
        Args:
            properties: Flat job properties
            finder_factory: Builds the dataset finder; defaults to the class named
                by ``gobblin.dataset.profile.class``
            source_fs: Source store; defaults to ``source.filebased.fs.uri``
            target_fs: Target store; defaults to ``writer.fs.uri``
            max_workers: Datasets planned concurrently; defaults to
                ``gobblin.copy.planner.threads`` or 1
        """
        self.properties = dict(properties)
        self.finder_factory = finder_factory or self._default_finder_factory
        self._source_fs = source_fs
        self._target_fs = target_fs
        self.max_workers = max_workers or self._planner_threads()

    def _planner_threads(self) -> int:
        value = self.properties.get(PLANNER_THREADS_KEY, '1')
        try:
            threads = int(value)
        except ValueError as e:
            raise ConfigurationError(f"Invalid {PLANNER_THREADS_KEY} '{value}': not an integer") from e
        if threads < 1:
            raise ConfigurationError(f"Invalid {PLANNER_THREADS_KEY} '{value}': must be at least 1")
        return threads

    @staticmethod
    def _default_finder_factory(properties: Mapping[str, str], fs: FileSystem) -> DatasetFinder:
        return instantiate_dataset_finder(properties, fs, DEFAULT_DATASET_PROFILE_CLASS)

    def get_source_file_system(self) -> FileSystem:
        if self._source_fs is None:
            self._source_fs = self._file_system(SOURCE_FILEBASED_FS_URI)
        return self._source_fs

    def get_target_file_system(self) -> FileSystem:
        if self._target_fs is None:
            self._target_fs = self._file_system(WRITER_FILE_SYSTEM_URI)
        return self._target_fs

    def _file_system(self, uri_key: str) -> FileSystem:
        uri = self.properties.get(uri_key, LOCAL_FS_URI)
        try:
            return get_file_system(uri)
        except ValueError as e:
            raise ConfigurationError(f"Invalid {uri_key} '{uri}': {e}") from e

    def get_work_units(self) -> List[WorkUnit]:
        """
        Plan the whole job.

        Returns:
            Work units in dataset, partition, then file order

        Raises:
            ConfigurationError: If a required property is missing
            DiscoveryError: If discovery or file listing fails
            SerializationError: If a descriptor cannot be encoded
        """
        require_publish_dir(self.properties)
        copy_context = CopyContext()

        try:
            dataset_finder = self.finder_factory(self.properties, self.get_source_file_system())
            datasets = dataset_finder.find_datasets()
            target_fs = self.get_target_file_system()
        except STORE_ERRORS as e:
            logger.error(f"Dataset discovery failed: {e}")
            raise DiscoveryError(f"Dataset discovery failed: {e}") from e

        logger.info(f"Planning {len(datasets)} datasets")

        if self.max_workers > 1 and len(datasets) > 1:
            listings = self._list_datasets_in_parallel(datasets, dataset_finder, target_fs, copy_context)
        else:
            listings = [self._list_dataset(dataset, dataset_finder, target_fs, copy_context)
                        for dataset in datasets]

        work_units = []
        for metadata, files in listings:
            work_units.extend(self._plan_files(metadata, files))
        logger.info(f"Created {len(work_units)} workunits")
        return work_units

    def _list_datasets_in_parallel(self, datasets: List[CopyableDataset], dataset_finder: DatasetFinder,
                                   target_fs: FileSystem, copy_context: CopyContext
                                   ) -> List[Tuple[CopyableDatasetMetadata, List[CopyableFile]]]:
        """
        List datasets concurrently, each against its own fork of ``copy_context``.

        Claims are then merged back in discovery order, so a file seen by several
        datasets always belongs to the earliest one, as in a serial run.
        """
        forks = [copy_context.fork() for _ in datasets]
        with ThreadPoolExecutor(max_workers=self.max_workers) as executor:
            futures = [
                executor.submit(self._list_dataset, dataset, dataset_finder, target_fs, fork)
                for dataset, fork in zip(datasets, forks)
            ]
            try:
                listings = [future.result() for future in futures]
            except Exception:
                for future in futures:
                    future.cancel()
                raise

        reconciled = []
        for (metadata, files), fork in zip(listings, forks):
            already_claimed = copy_context.merge_claims(fork)
            if already_claimed:
                logger.debug(f"Dataset {metadata.dataset_root}: {len(already_claimed)} files "
                             f"already planned by an earlier dataset")
            reconciled.append((metadata, [f for f in files if f.origin_path not in already_claimed]))
        return reconciled

    def _list_dataset(self, dataset: CopyableDataset, dataset_finder: DatasetFinder, target_fs: FileSystem,
                      copy_context: CopyContext) -> Tuple[CopyableDatasetMetadata, List[CopyableFile]]:
        dataset_root = dataset.dataset_root()
        target_root = get_target_root(self.properties, dataset_finder, dataset)
        copy_configuration = CopyConfiguration.from_properties(
            self.properties, target_root=target_root, copy_context=copy_context
        )

        try:
            files = dataset.get_copyable_files(target_fs, copy_configuration)
        except STORE_ERRORS as e:
            logger.error(f"Failed to list copyable files for {dataset_root}: {e}")
            raise DiscoveryError(f"Failed to list copyable files: {e}", dataset=dataset_root) from e

        return CopyableDatasetMetadata(dataset_root=dataset_root, target_root=target_root), list(files)

    def _plan_files(self, metadata: CopyableDatasetMetadata, files: List[CopyableFile]) -> List[WorkUnit]:
        dataset_root = metadata.dataset_root
        work_units = []
        for partition in partition_copyable_files(files):
            extract = Extract(TableType.SNAPSHOT_ONLY, COPY_PREFIX, partition.name)
            for copyable_file in partition.files:
                try:
                    work_units.append(self._build_work_unit(extract, copyable_file, metadata))
                except SerializationError as e:
                    e.dataset = e.dataset or dataset_root
                    e.file_path = e.file_path or copyable_file.origin_path
                    logger.error(f"Failed to build work unit: {e}")
                    raise
            logger.debug(f"Dataset {dataset_root} partition {partition.name}: {len(partition)} work units")
        return work_units

    def _build_work_unit(self, extract: Extract, copyable_file: CopyableFile,
                         metadata: CopyableDatasetMetadata) -> WorkUnit:
        work_unit = WorkUnit(extract)
        work_unit.add_all(self.properties)
        serialize_copyable_file(work_unit, copyable_file)
        serialize_copyable_dataset(work_unit, metadata)
        add_custom_tag(work_unit, DATASET_ROOT_METADATA_NAME, metadata.dataset_root)
        work_unit.set_prop(DATASET_URN_KEY, metadata.dataset_urn())
        work_unit.set_prop(SLA_DATASET_URN_KEY, metadata.dataset_root)
        work_unit.set_prop(SLA_PARTITION_KEY, copyable_file.file_set)
        set_work_unit_guid(work_unit, compute_work_unit_guid(work_unit))
        return work_unit.freeze()


def serialize_copyable_file(work_unit: WorkUnit, copyable_file: CopyableFile) -> None:
    work_unit.set_prop(SERIALIZED_COPYABLE_FILE, copyable_file.serialize())


def deserialize_copyable_file(work_unit: WorkUnit) -> CopyableFile:
    """Read back the copyable file of a planned work unit."""
    return CopyableFile.deserialize(work_unit.get_prop(SERIALIZED_COPYABLE_FILE))


def serialize_copyable_dataset(work_unit: WorkUnit, metadata: CopyableDatasetMetadata) -> None:
    work_unit.set_prop(SERIALIZED_COPYABLE_DATASET, metadata.serialize())


def deserialize_copyable_dataset(work_unit: WorkUnit) -> CopyableDatasetMetadata:
    """Read back the dataset metadata of a planned work unit."""
    return CopyableDatasetMetadata.deserialize(work_unit.get_prop(SERIALIZED_COPYABLE_DATASET))
