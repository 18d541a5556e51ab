"""
Run-scoped state shared by every dataset planned in one run.
"""
import threading
from typing import Callable, Dict, Optional, Set, TypeVar

T = TypeVar('T')


class CopyContext:
    """
    Shared, lock-guarded state for one planning run.

    Later datasets observe the copy decisions made by earlier ones through
    ``claim``; ``get_file_status`` caches store lookups across datasets.
    """

    def __init__(self):
        self._lock = threading.Lock()
        self._claimed: Set[str] = set()
        self._file_status_cache: Dict[str, object] = {}

    def claim(self, origin_path: str) -> bool:
        """
        Claim an origin path for this run.

        Returns:
            bool: True if the path was not claimed before, False otherwise
        """
        with self._lock:
            if origin_path in self._claimed:
                return False
            self._claimed.add(origin_path)
            return True

    def fork(self) -> 'CopyContext':
        """Context with its own claims that shares this run's file-status cache."""
        forked = CopyContext()
        forked._lock = self._lock
        forked._file_status_cache = self._file_status_cache
        return forked

    def merge_claims(self, other: 'CopyContext') -> Set[str]:
        """
        Adopt the claims made in ``other``.

        Returns:
            Set[str]: Paths of ``other`` that this context had already claimed
        """
        with self._lock:
            claims = set(other._claimed)
            already_claimed = claims & self._claimed
            self._claimed |= claims
        return already_claimed

    def is_claimed(self, origin_path: str) -> bool:
        with self._lock:
            return origin_path in self._claimed

    def get_file_status(self, path: str, loader: Callable[[str], Optional[T]]) -> Optional[T]:
        """Return the cached status for ``path``, loading it once on a miss."""
        with self._lock:
            if path in self._file_status_cache:
                return self._file_status_cache[path]
        status = loader(path)
        with self._lock:
            # First writer wins so all datasets see the same status
            return self._file_status_cache.setdefault(path, status)

    @property
    def claimed_count(self) -> int:
        with self._lock:
            return len(self._claimed)
