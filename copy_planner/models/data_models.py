"""
Core data models for copy planning.
"""
import json
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any, Dict, Generic, List, Mapping, Optional, Tuple, TypeVar

from ..errors import SerializationError


@dataclass(frozen=True)
class OwnerAndPermission:
    """Owner, group and permission bits to apply at the destination."""
    owner: Optional[str] = None
    group: Optional[str] = None
    permission: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return {'owner': self.owner, 'group': self.group, 'permission': self.permission}

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'OwnerAndPermission':
        return cls(owner=data.get('owner'), group=data.get('group'), permission=data.get('permission'))


@dataclass(frozen=True)
class CopyableFile:
    """
    One file to copy, plus the metadata the execution layer needs to copy it.

    ``file_set`` must be derived deterministically from the source file so the
    same file lands in the same partition on every planning run.
    """
    origin_path: str
    destination_path: str
    file_set: str
    origin_size: int = 0
    origin_modification_time: int = 0
    checksum: Optional[str] = None
    destination_owner_and_permission: Optional[OwnerAndPermission] = None
    preserve: str = ''
    origin_timestamp: int = 0
    upstream_timestamp: int = 0
    metadata: Mapping[str, str] = field(default_factory=dict, hash=False)

    def __post_init__(self):
        object.__setattr__(self, 'metadata', MappingProxyType(dict(self.metadata)))

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for serialization."""
        owner_and_permission = self.destination_owner_and_permission
        return {
            'origin_path': self.origin_path,
            'destination_path': self.destination_path,
            'file_set': self.file_set,
            'origin_size': self.origin_size,
            'origin_modification_time': self.origin_modification_time,
            'checksum': self.checksum,
            'destination_owner_and_permission': owner_and_permission.to_dict() if owner_and_permission else None,
            'preserve': self.preserve,
            'origin_timestamp': self.origin_timestamp,
            'upstream_timestamp': self.upstream_timestamp,
            'metadata': dict(self.metadata)
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'CopyableFile':
        """Create from dictionary."""
        owner_and_permission = data.get('destination_owner_and_permission')
        return cls(
            origin_path=data['origin_path'],
            destination_path=data['destination_path'],
            file_set=data['file_set'],
            origin_size=int(data.get('origin_size', 0)),
            origin_modification_time=int(data.get('origin_modification_time', 0)),
            checksum=data.get('checksum'),
            destination_owner_and_permission=(
                OwnerAndPermission.from_dict(owner_and_permission) if owner_and_permission else None
            ),
            preserve=data.get('preserve', ''),
            origin_timestamp=int(data.get('origin_timestamp', 0)),
            upstream_timestamp=int(data.get('upstream_timestamp', 0)),
            metadata=dict(data.get('metadata') or {})
        )

    def serialize(self) -> str:
        """Encode as canonical JSON (sorted keys, fixed separators)."""
        try:
            return json.dumps(self.to_dict(), sort_keys=True, separators=(',', ':'))
        except (TypeError, ValueError) as e:
            raise SerializationError(f"Cannot serialize copyable file: {e}",
                                     file_path=self.origin_path) from e

    @classmethod
    def deserialize(cls, serialized: Optional[str]) -> 'CopyableFile':
        if serialized is None:
            raise SerializationError("No serialized copyable file")
        try:
            return cls.from_dict(json.loads(serialized))
        except (TypeError, ValueError, KeyError) as e:
            raise SerializationError(f"Cannot deserialize copyable file: {e}") from e

    def get_dataset_and_partition(self, metadata: 'CopyableDatasetMetadata') -> 'DatasetAndPartition':
        return DatasetAndPartition(metadata=metadata, partition=self.file_set)


@dataclass(frozen=True)
class CopyableDatasetMetadata:
    """Serializable snapshot of a dataset: where it comes from and where it goes."""
    dataset_root: str
    target_root: str

    def dataset_urn(self) -> str:
        return f"{self.dataset_root}#{self.target_root}"

    def serialize(self) -> str:
        return json.dumps({'dataset_root': self.dataset_root, 'target_root': self.target_root},
                          sort_keys=True, separators=(',', ':'))

    @classmethod
    def deserialize(cls, serialized: Optional[str]) -> 'CopyableDatasetMetadata':
        if serialized is None:
            raise SerializationError("No serialized copyable dataset metadata")
        try:
            data = json.loads(serialized)
            return cls(dataset_root=data['dataset_root'], target_root=data['target_root'])
        except (TypeError, ValueError, KeyError) as e:
            raise SerializationError(f"Cannot deserialize copyable dataset metadata: {e}") from e


@dataclass(frozen=True)
class DatasetAndPartition:
    """A dataset paired with one of its partitions."""
    metadata: CopyableDatasetMetadata
    partition: str

    def identifier(self) -> str:
        return f"{self.metadata.dataset_urn()}@{self.partition}"


T = TypeVar('T')


@dataclass(frozen=True)
class Partition(Generic[T]):
    """A named, ordered group of items sharing one grouping key."""
    name: str
    files: Tuple[T, ...] = ()

    def __len__(self) -> int:
        return len(self.files)


class PartitionBuilder(Generic[T]):
    """Accumulates files for one partition, then freezes them into a Partition."""

    def __init__(self, name: str):
        self.name = name
        self._files: List[T] = []

    def add(self, file: T) -> 'PartitionBuilder[T]':
        file_set = getattr(file, 'file_set', self.name)
        if file_set != self.name:
            raise ValueError(f"File set '{file_set}' does not match partition '{self.name}'")
        self._files.append(file)
        return self

    def build(self) -> Partition[T]:
        return Partition(name=self.name, files=tuple(self._files))
