"""Local filesystem storage for event documents.

Files live under ``<upload_dir>/<event_id>/<slot>-<file name>`` and are served
under ``<uploads_url_prefix>/<event_id>/<slot>-<file name>``. Transient
filesystem errors are retried; a missing file is not an error.
"""

from functools import lru_cache
from pathlib import Path
from urllib.parse import unquote, urlsplit
from uuid import UUID

from loguru import logger
from tenacity import Retrying, before_sleep_log, retry_if_exception, stop_after_attempt, wait_exponential

from health_api.settings import Settings, get_settings


def _is_transient(error: BaseException) -> bool:
    return isinstance(error, OSError) and not isinstance(error, (FileNotFoundError, IsADirectoryError, PermissionError))


class StorageService:
    """Stores, locates and deletes uploaded documents."""

    def __init__(self, settings: Settings | None = None):
        self.settings = settings or get_settings()
        self.base_dir = Path(self.settings.upload_dir)
        self.url_prefix = "/" + self.settings.uploads_url_prefix.strip("/")
        self._retrying = Retrying(
            stop=stop_after_attempt(max(1, self.settings.storage_retry_attempts)),
            wait=wait_exponential(multiplier=0.1, max=2),
            retry=retry_if_exception(_is_transient),
            reraise=True,
            before_sleep=before_sleep_log(logger, "DEBUG"),
        )

    @staticmethod
    def stored_name(slot: str, file_name: str) -> str:
        """Return the on-disk name of a document, stripped of any directory part."""
        return f"{slot}-{Path(file_name).name}"

    def url_for(self, event_id: UUID, slot: str, file_name: str) -> str:
        return f"{self.url_prefix}/{event_id}/{self.stored_name(slot, file_name)}"

    def path_for_url(self, url: str) -> Path:
        """Map a document URL (absolute or relative) to its path on disk.

        Raises:
            ValueError: If the URL does not point inside the upload directory
        """
        url_path = unquote(urlsplit(url).path)
        if not url_path.startswith(self.url_prefix + "/"):
            raise ValueError(f"URL is not a stored document: {url}")

        relative = url_path[len(self.url_prefix) + 1 :]
        base = self.base_dir.resolve()
        path = (base / relative).resolve()
        if base not in path.parents:
            raise ValueError(f"URL escapes the upload directory: {url}")
        return path

    def save(self, event_id: UUID, slot: str, file_name: str, content: bytes) -> str:
        """Write a document and return the URL it is served under."""
        path = self.base_dir / str(event_id) / self.stored_name(slot, file_name)

        def _write() -> None:
            path.parent.mkdir(parents=True, exist_ok=True)
            path.write_bytes(content)

        self._retrying(_write)
        logger.debug(f"Service: stored {len(content)} bytes at {path}")
        return self.url_for(event_id, slot, file_name)

    def exists(self, url: str) -> bool:
        try:
            return self.path_for_url(url).is_file()
        except ValueError:
            return False

    def delete(self, url: str) -> bool:
        """Delete the document behind ``url``.

        Returns:
            True if a file was removed, False if there was nothing to remove
        """
        path = self.path_for_url(url)
        if not path.is_file():
            logger.warning(f"Service: file not found, nothing to delete: {path}")
            return False

        self._retrying(path.unlink, missing_ok=True)
        logger.debug(f"Service: deleted file {path}")
        return True


@lru_cache
def get_storage_service() -> StorageService:
    """Get the storage service singleton using global settings."""
    return StorageService(get_settings())
