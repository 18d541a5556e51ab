"""
Copy Planner - plans resumable bulk file-copy jobs as serializable work units.
"""

from .services.copy_source import CopySource
from .models.config import CopyConfiguration, S3Config
from .models.data_models import CopyableFile, CopyableDatasetMetadata, Partition
from .models.work_unit import WorkUnit, Extract
from .services.guid import Guid
from .errors import PlanningError, ConfigurationError, DiscoveryError, SerializationError

__version__ = "1.0.0"
__all__ = [
    "CopySource",
    "CopyConfiguration",
    "S3Config",
    "CopyableFile",
    "CopyableDatasetMetadata",
    "Partition",
    "WorkUnit",
    "Extract",
    "Guid",
    "PlanningError",
    "ConfigurationError",
    "DiscoveryError",
    "SerializationError"
]
