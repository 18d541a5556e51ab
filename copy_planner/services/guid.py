"""
Deterministic identity for work units.

A Guid is a SHA-1 digest. Two work units get the same Guid exactly when they
carry the same converter chain and the same serialized copyable file, which is
what lets a retried job recognize work it already completed.
"""
import hashlib
from typing import Optional, Union

from ..errors import SerializationError
from ..models.config import CONVERTER_CLASSES_KEY
from ..models.data_models import CopyableFile
from ..models.work_unit import SERIALIZED_COPYABLE_FILE, WORK_UNIT_GUID, WorkUnit

GUID_LENGTH = 20


class Guid:
    """An immutable 20 byte digest."""

    def __init__(self, digest: bytes):
        if len(digest) != GUID_LENGTH:
            raise ValueError(f"Guid must be {GUID_LENGTH} bytes, got {len(digest)}")
        self._digest = bytes(digest)

    @classmethod
    def from_bytes(cls, *byte_arrays: bytes) -> 'Guid':
        if not byte_arrays:
            raise ValueError("Cannot create a Guid from nothing")
        sha = hashlib.sha1()
        for byte_array in byte_arrays:
            sha.update(byte_array)
        return cls(sha.digest())

    @classmethod
    def from_strings(cls, *strings: str) -> 'Guid':
        if not strings:
            raise ValueError("Cannot create a Guid from nothing")
        return cls.from_bytes(*(s.encode('utf-8') for s in strings))

    @classmethod
    def of(cls, copyable_file: CopyableFile) -> 'Guid':
        """Guid of a copyable file, taken over its canonical serialization."""
        return cls.from_strings(copyable_file.serialize())

    def append(self, other: Union['Guid', CopyableFile]) -> 'Guid':
        """Return a new Guid over this digest followed by ``other``'s digest."""
        other_guid = other if isinstance(other, Guid) else Guid.of(other)
        return Guid.from_bytes(self._digest, other_guid._digest)

    @property
    def digest(self) -> bytes:
        return self._digest

    @classmethod
    def deserialize(cls, serialized: str) -> 'Guid':
        try:
            return cls(bytes.fromhex(serialized))
        except ValueError as e:
            raise SerializationError(f"Invalid guid '{serialized}': {e}") from e

    def __str__(self) -> str:
        return self._digest.hex()

    def __repr__(self) -> str:
        return f"Guid({self})"

    def __eq__(self, other) -> bool:
        return isinstance(other, Guid) and self._digest == other._digest

    def __hash__(self) -> int:
        return hash(self._digest)


def compute_work_unit_guid(work_unit: WorkUnit) -> Guid:
    """Guid over the converter chain (or "") and the work unit's copyable file."""
    converter_chain = work_unit.get_prop(CONVERTER_CLASSES_KEY, '')
    copyable_file = CopyableFile.deserialize(work_unit.get_prop(SERIALIZED_COPYABLE_FILE))
    return Guid.from_strings(converter_chain).append(copyable_file)


def set_work_unit_guid(work_unit: WorkUnit, guid: Guid) -> None:
    work_unit.set_prop(WORK_UNIT_GUID, str(guid))


def get_work_unit_guid(work_unit: WorkUnit) -> Optional[Guid]:
    """Guid stored on the work unit, or None if it was never computed."""
    if not work_unit.contains(WORK_UNIT_GUID):
        return None
    return Guid.deserialize(work_unit.get_prop(WORK_UNIT_GUID))
