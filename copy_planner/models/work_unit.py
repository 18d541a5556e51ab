"""
Work unit model handed to the execution layer.
"""
from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, Iterator, Mapping, Optional

from .config import COPY_PREFIX

# Well-known keys, read back by the execution layer
SERIALIZED_COPYABLE_FILE = COPY_PREFIX + '.serialized.copyable.file'
SERIALIZED_COPYABLE_DATASET = COPY_PREFIX + '.serialized.copyable.datasets'
WORK_UNIT_GUID = COPY_PREFIX + '.work.unit.guid'
DATASET_URN_KEY = 'dataset.urn'

# SLA event keys
SLA_DATASET_URN_KEY = 'event.sla.datasetUrn'
SLA_PARTITION_KEY = 'event.sla.partition'

# Custom metric tags, stored as comma separated name:value pairs
METRICS_CUSTOM_TAGS_KEY = 'metrics.context.tags'
DATASET_ROOT_METADATA_NAME = 'datasetRoot'


class TableType(str, Enum):
    SNAPSHOT_ONLY = 'SNAPSHOT_ONLY'
    SNAPSHOT_APPEND = 'SNAPSHOT_APPEND'
    APPEND_ONLY = 'APPEND_ONLY'


@dataclass(frozen=True)
class Extract:
    """Logical extraction identity shared by all work units of one partition."""
    table_type: TableType
    namespace: str
    table: str

    def to_dict(self) -> Dict[str, str]:
        return {'table_type': self.table_type.value, 'namespace': self.namespace, 'table': self.table}

    @classmethod
    def from_dict(cls, data: Dict[str, str]) -> 'Extract':
        return cls(table_type=TableType(data['table_type']), namespace=data['namespace'], table=data['table'])


class WorkUnit:
    """
    A string property bag plus an Extract identity.

    Work units are assembled by the planner and then frozen; a frozen work unit
    rejects further writes.
    """

    def __init__(self, extract: Extract, properties: Optional[Mapping[str, str]] = None):
        self.extract = extract
        self._properties: Dict[str, str] = dict(properties or {})
        self._frozen = False

    def set_prop(self, key: str, value: Any) -> None:
        if self._frozen:
            raise RuntimeError(f"Cannot set '{key}' on a frozen work unit")
        self._properties[key] = str(value)

    def get_prop(self, key: str, default: Optional[str] = None) -> Optional[str]:
        return self._properties.get(key, default)

    def contains(self, key: str) -> bool:
        return key in self._properties

    def add_all(self, properties: Mapping[str, str]) -> None:
        for key, value in properties.items():
            self.set_prop(key, value)

    def freeze(self) -> 'WorkUnit':
        self._frozen = True
        return self

    @property
    def frozen(self) -> bool:
        return self._frozen

    @property
    def properties(self) -> Dict[str, str]:
        """A copy of the property bag."""
        return dict(self._properties)

    def __iter__(self) -> Iterator[str]:
        return iter(self._properties)

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for the job-state store."""
        return {'extract': self.extract.to_dict(), 'properties': dict(self._properties)}

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'WorkUnit':
        return cls(Extract.from_dict(data['extract']), data.get('properties', {})).freeze()

    def __repr__(self) -> str:
        return f"WorkUnit(extract={self.extract!r}, guid={self.get_prop(WORK_UNIT_GUID)!r})"


def add_custom_tag(work_unit: WorkUnit, name: str, value: str) -> None:
    """Append a ``name:value`` metric tag to the work unit's custom tags."""
    tag = f"{name}:{value}"
    existing = work_unit.get_prop(METRICS_CUSTOM_TAGS_KEY)
    work_unit.set_prop(METRICS_CUSTOM_TAGS_KEY, f"{existing},{tag}" if existing else tag)


def get_custom_tags(work_unit: WorkUnit) -> Dict[str, str]:
    tags: Dict[str, str] = {}
    raw = work_unit.get_prop(METRICS_CUSTOM_TAGS_KEY)
    if not raw:
        return tags
    for tag in raw.split(','):
        name, _, value = tag.partition(':')
        tags[name] = value
    return tags
