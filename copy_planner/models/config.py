"""
Configuration classes and property keys for the copy planner.
"""
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, Mapping, Optional

from .copy_context import CopyContext

# Property keys shared with the execution layer
COPY_PREFIX = 'gobblin.copy'
DATA_PUBLISHER_FINAL_DIR = 'data.publisher.final.dir'
SOURCE_FILEBASED_FS_URI = 'source.filebased.fs.uri'
WRITER_FILE_SYSTEM_URI = 'writer.fs.uri'
LOCAL_FS_URI = 'file:///'
DATASET_PROFILE_CLASS_KEY = 'gobblin.dataset.profile.class'
DATASET_PATTERN_KEY = 'gobblin.dataset.pattern'
CONVERTER_CLASSES_KEY = 'converter.classes'
PRESERVE_ATTRIBUTES_KEY = COPY_PREFIX + '.preserved.attributes'
PLANNER_THREADS_KEY = COPY_PREFIX + '.planner.threads'


@dataclass
class S3Config:
    """Configuration for S3 service connection."""
    endpoint: str
    access_key: str
    secret_key: str
    region: Optional[str] = None

    @classmethod
    def from_env(cls, prefix: str = 'COPY') -> 'S3Config':
        """Create S3Config from environment variables with given prefix."""
        return cls(
            endpoint=os.getenv(f'{prefix}_S3_ENDPOINT', ''),
            access_key=os.getenv(f'{prefix}_S3_ACCESS_KEY', ''),
            secret_key=os.getenv(f'{prefix}_S3_SECRET_KEY', ''),
            region=os.getenv(f'{prefix}_S3_REGION')
        )


@dataclass(frozen=True)
class CopyConfiguration:
    """Immutable planning configuration for one dataset."""
    target_root: str
    copy_context: CopyContext
    preserve: str = ''
    properties: Mapping[str, str] = field(default_factory=dict)

    @classmethod
    def from_properties(cls, properties: Mapping[str, str], target_root: str,
                        copy_context: CopyContext) -> 'CopyConfiguration':
        """Create a CopyConfiguration bound to a resolved target root and a shared context."""
        return cls(
            target_root=target_root,
            copy_context=copy_context,
            preserve=properties.get(PRESERVE_ATTRIBUTES_KEY, ''),
            properties=dict(properties)
        )


def load_properties(path: str) -> Dict[str, str]:
    """
    Read a ``key=value`` properties file into a flat dictionary.

    Blank lines and lines starting with ``#`` or ``!`` are skipped. A ``:`` is
    accepted as separator when the line has no ``=``.
    """
    properties_path = Path(path)
    if not properties_path.exists():
        raise FileNotFoundError(f"Properties file not found: {path}")

    properties: Dict[str, str] = {}
    with open(properties_path, 'r', encoding='utf-8') as f:
        for raw_line in f:
            line = raw_line.strip()
            if not line or line[0] in '#!':
                continue
            separator = '=' if '=' in line else ':'
            key, _, value = line.partition(separator)
            properties[key.strip()] = value.strip()
    return properties
