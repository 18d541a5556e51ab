"""
Models package for the copy planner.
"""
from .copy_context import CopyContext
from .config import CopyConfiguration, S3Config, load_properties
from .data_models import (
    CopyableFile,
    CopyableDatasetMetadata,
    DatasetAndPartition,
    OwnerAndPermission,
    Partition,
    PartitionBuilder
)
from .work_unit import Extract, TableType, WorkUnit

__all__ = [
    'CopyContext',
    'CopyConfiguration',
    'S3Config',
    'load_properties',
    'CopyableFile',
    'CopyableDatasetMetadata',
    'DatasetAndPartition',
    'OwnerAndPermission',
    'Partition',
    'PartitionBuilder',
    'Extract',
    'TableType',
    'WorkUnit'
]
