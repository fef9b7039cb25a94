"""Shared data models and error types used across the file analyzer client."""

from __future__ import annotations

import io
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import BinaryIO, Dict, Optional, Tuple


ANALYZE_SINGLE_PATH = "/api/v1/files/upload-and-analyze"
ANALYZE_MULTIPLE_PATH = "/api/v1/files/upload-multiple-and-analyze"
DOWNLOAD_PATH = "/api/v1/files/download/{archive_file_name}"

# Dialog filter hint only; the backend decides what it accepts.
ACCEPTED_EXTENSIONS = (".txt", ".zip", ".rar")


class UploadMode(str, Enum):
    """Whether a new selection replaces or extends the current one."""

    SINGLE = "single"
    MULTIPLE = "multiple"


class SessionStatus(str, Enum):
    """Lifecycle states of an upload-and-analyze session."""

    IDLE = "idle"
    UPLOADING = "uploading"
    SUCCEEDED = "succeeded"
    FAILED = "failed"


@dataclass(frozen=True)
class SelectedFile:
    """A file chosen by the user; content is only opened when a request is built."""

    name: str
    size_bytes: int
    path: Optional[Path] = None
    data: Optional[bytes] = None

    def __post_init__(self) -> None:
        if self.size_bytes < 0:
            raise ValueError(f"size_bytes must be non-negative, got {self.size_bytes}")
        if self.path is None and self.data is None:
            raise ValueError(f"{self.name} has neither a path nor in-memory content")

    @classmethod
    def from_path(cls, path: Path | str) -> "SelectedFile":
        """Describe a file on disk using its name and current size."""
        resolved = Path(path).expanduser()
        return cls(name=resolved.name, size_bytes=resolved.stat().st_size, path=resolved)

    @classmethod
    def from_bytes(cls, name: str, data: bytes) -> "SelectedFile":
        return cls(name=name, size_bytes=len(data), data=data)

    def open(self) -> BinaryIO:
        """Return a binary handle over the file content; the caller closes it."""
        if self.data is not None:
            return io.BytesIO(self.data)
        return self.path.open("rb")


@dataclass(frozen=True)
class SelectionState:
    """Snapshot of the chosen files and the active upload mode."""

    files: Tuple[SelectedFile, ...] = ()
    mode: UploadMode = UploadMode.SINGLE

    @property
    def is_empty(self) -> bool:
        return not self.files

    @property
    def total_size_bytes(self) -> int:
        return sum(item.size_bytes for item in self.files)


class AnalyzerError(Exception):
    """Base class for every failure surfaced by the client core."""

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message

    def __str__(self) -> str:
        return self.message


class ValidationError(AnalyzerError):
    """Raised when an analysis is requested without any selected file."""


class SchemaError(AnalyzerError):
    """Raised when a response body does not match the analysis result contract."""


class PreconditionError(AnalyzerError):
    """Raised when a download is requested without an archive reference."""


class TransportError(AnalyzerError):
    """Raised when a request never produced an HTTP response."""


@dataclass
class HttpError(AnalyzerError):
    """Non-success HTTP response that preserves the status code and server payload."""

    status_code: int
    message: str = "Request failed"
    payload: Optional[Dict[str, object]] = field(default=None, repr=False)

    def __post_init__(self) -> None:
        Exception.__init__(self, self.message, self.status_code)

    def __str__(self) -> str:
        return f"{self.message} (status {self.status_code})"


@dataclass
class DownloadError(HttpError):
    """Non-success response from the archive download endpoint."""

    message: str = "Failed to download archive"
