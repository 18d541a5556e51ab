"""
Error taxonomy for copy planning.

Every error raised out of ``CopySource.get_work_units`` is a ``PlanningError``.
"""
from typing import Optional


class PlanningError(Exception):
    """Base class for all planning failures."""

    def __init__(self, message: str, dataset: Optional[str] = None, file_path: Optional[str] = None):
        super().__init__(message)
        self.dataset = dataset
        self.file_path = file_path

    def __str__(self) -> str:
        message = super().__str__()
        context = []
        if self.dataset:
            context.append(f"dataset={self.dataset}")
        if self.file_path:
            context.append(f"file={self.file_path}")
        if context:
            return f"{message} ({', '.join(context)})"
        return message


class ConfigurationError(PlanningError):
    """A required property is missing or invalid."""
    pass


class DiscoveryError(PlanningError):
    """Dataset discovery or file enumeration failed."""
    pass


class SerializationError(PlanningError):
    """A copyable file or dataset descriptor could not be encoded or decoded."""
    pass
