"""
Groups copyable files into partitions keyed by file set.
"""
from typing import Dict, Iterable, List

from ..models.data_models import CopyableFile, Partition, PartitionBuilder


def partition_copyable_files(files: Iterable[CopyableFile]) -> List[Partition[CopyableFile]]:
    """
    Group files by ``file_set`` in a single pass.

    Files keep their discovery order inside a partition. Partitions come back in
    the order their file set was first seen.
    """
    builders: Dict[str, PartitionBuilder[CopyableFile]] = {}
    for copyable_file in files:
        builder = builders.get(copyable_file.file_set)
        if builder is None:
            builder = PartitionBuilder(copyable_file.file_set)
            builders[copyable_file.file_set] = builder
        builder.add(copyable_file)
    return [builder.build() for builder in builders.values()]
