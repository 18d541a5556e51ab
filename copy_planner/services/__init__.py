# Services package
from .partitioner import partition_copyable_files
from .path_utils import resolve_target_root
from .guid import Guid, compute_work_unit_guid, get_work_unit_guid
from .copy_source import CopySource
from .plan_manifest import PlanManifest

__all__ = [
    'partition_copyable_files', 'resolve_target_root', 'Guid', 'compute_work_unit_guid',
    'get_work_unit_guid', 'CopySource', 'PlanManifest'
]
