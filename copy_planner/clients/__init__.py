# Client packages
from .filesystems import FileStatus, FileSystem, LocalFileSystem, S3FileSystem, get_file_system
from .dataset_finders import CopyableDataset, DatasetFinder, GlobDatasetFinder, RecursiveCopyableDataset

__all__ = [
    'FileStatus', 'FileSystem', 'LocalFileSystem', 'S3FileSystem', 'get_file_system',
    'CopyableDataset', 'DatasetFinder', 'GlobDatasetFinder', 'RecursiveCopyableDataset'
]
