import logging
from pathlib import Path
from typing import Optional

from app.config import get_settings

logger = logging.getLogger(__name__)


class BlobStore:
    """
    File storage on the local filesystem, namespaced by disk.

    A blob is addressed by a relative path on a named disk; the disk maps to
    the directory `<root>/<disk>`.
    """

    def __init__(self, root: Optional[str] = None):
        self.root = Path(root or get_settings().STORAGE_ROOT)

    def _resolve(self, disk: str, path: str) -> Path:
        """Resolve a disk-relative path, refusing paths that escape the disk."""
        disk_root = (self.root / disk).resolve()
        target = (disk_root / path).resolve()
        if disk_root != target and disk_root not in target.parents:
            raise ValueError(f"Path '{path}' escapes disk '{disk}'")
        return target

    def put(self, disk: str, path: str, data: bytes) -> str:
        """
        Write `data` at `path` on `disk`, replacing any existing file.

        Returns:
            The disk-relative path the blob was stored under
        """
        target = self._resolve(disk, path)
        target.parent.mkdir(parents=True, exist_ok=True)
        target.write_bytes(data)
        logger.debug(f"Stored blob {disk}:{path} ({len(data)} bytes)")
        return path

    def delete(self, disk: str, path: str) -> bool:
        """
        Delete the blob at `path` on `disk`.

        Returns:
            True if a file was removed, False if it did not exist
        """
        target = self._resolve(disk, path)
        try:
            target.unlink()
        except FileNotFoundError:
            return False
        logger.debug(f"Deleted blob {disk}:{path}")
        return True

    def exists(self, disk: str, path: str) -> bool:
        return self._resolve(disk, path).is_file()

    def read(self, disk: str, path: str) -> bytes:
        return self._resolve(disk, path).read_bytes()
