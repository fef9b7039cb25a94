"""Fetch backend-generated archives and hand them to a save capability."""

from __future__ import annotations

from pathlib import Path, PurePosixPath, PureWindowsPath
from typing import Any, Callable, Optional

from core.models import PreconditionError
from services.logger import get_logger


logger = get_logger("downloader")

SaveArchive = Callable[[bytes, str], Any]


def _safe_file_name(archive_file_name: str) -> str:
    """Keep only the final path component so a server supplied name cannot escape the target."""
    name = PureWindowsPath(PurePosixPath(archive_file_name).name).name
    if name in {"", ".", ".."}:
        raise PreconditionError(f"Archive name {archive_file_name!r} is not a valid file name")
    return name


class DirectorySaver:
    """Save capability that writes archives into a fixed output directory."""

    def __init__(self, output_dir: Path | str) -> None:
        self._output_dir = Path(output_dir).expanduser()

    @property
    def output_dir(self) -> Path:
        return self._output_dir

    def __call__(self, content: bytes, archive_file_name: str) -> Path:
        if not self._output_dir.is_dir():
            raise PreconditionError(f"Output directory does not exist: {self._output_dir}")
        target = self._output_dir / _safe_file_name(archive_file_name)
        target.write_bytes(content)
        logger.info("Archive saved to %s (%d bytes)", target, len(content))
        return target


class ArchiveDownloader:
    """Download the archive referenced by an analysis result."""

    def __init__(self, api_client, save: SaveArchive) -> None:
        self._api_client = api_client
        self._save = save

    def set_api_client(self, api_client) -> None:
        self._api_client = api_client

    def fetch_and_save(self, archive_file_name: Optional[str], save: Optional[SaveArchive] = None) -> Any:
        """Fetch ``archive_file_name`` and pass its bytes to the save capability.

        ``save`` overrides the default capability for this call only. Both the
        capability and the client are captured before the request goes out, so
        settings changed while a download runs never redirect it.

        Raises :class:`PreconditionError` without touching the network when no
        archive name is available, and :class:`DownloadError` when the service
        answers with a non-success status.
        """
        if not archive_file_name:
            raise PreconditionError("no archive to download")
        save = save if save is not None else self._save
        api_client = self._api_client
        content = api_client.download_archive(archive_file_name)
        logger.info("Fetched %s (%d bytes)", archive_file_name, len(content))
        return save(content, archive_file_name)
