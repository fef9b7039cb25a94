"""Analysis response contract: pydantic models, validation, and display formatting."""

from __future__ import annotations

import re
from datetime import datetime
from typing import Any, List, Mapping, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic import ValidationError as PydanticValidationError

from core.models import SchemaError


BYTE_UNITS = ("Bytes", "KB", "MB", "GB")
MISSING_PLACEHOLDER = "-"

_FRACTION_PATTERN = re.compile(r"(\.\d{6})\d+")


def _trim_fraction(value: Any) -> Any:
    """Cut nanosecond precision timestamps down to the microseconds datetime supports."""
    if isinstance(value, str):
        return _FRACTION_PATTERN.sub(r"\1", value, count=1)
    return value


class _ResponseModel(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="ignore", frozen=True)


class FileStat(_ResponseModel):
    """Per-file statistics computed by the backend."""

    file_name: str = Field(alias="fileName")
    line_count: int = Field(alias="lineCount", ge=0)
    character_count: int = Field(alias="characterCount", ge=0)
    processing_time_millis: Optional[float] = Field(default=None, alias="processingTimeMillis", ge=0)
    processing_start_time: Optional[datetime] = Field(default=None, alias="processingStartTime")
    processing_end_time: Optional[datetime] = Field(default=None, alias="processingEndTime")
    thread_name: Optional[str] = Field(default=None, alias="threadName")
    processing_completed: bool = Field(default=False, alias="processingCompleted")

    @field_validator("processing_start_time", "processing_end_time", mode="before")
    @classmethod
    def _normalise_timestamp(cls, value: Any) -> Any:
        return _trim_fraction(value)


class TotalResult(_ResponseModel):
    """Aggregate statistics across every file of one analysis."""

    total_processed_files: int = Field(alias="totalProcessedFiles", ge=0)
    total_line_count: int = Field(alias="totalLineCount", ge=0)
    total_character_count: int = Field(alias="totalCharacterCount", ge=0)
    total_processing_time_millis: float = Field(alias="totalProcessingTimeMillis", ge=0)
    file_stats_list: List[FileStat] = Field(alias="fileStatsList")
    successful_file_count: Optional[int] = Field(default=None, alias="successfulFileCount", ge=0)
    failed_file_count: Optional[int] = Field(default=None, alias="failedFileCount", ge=0)
    analysis_start_time: Optional[datetime] = Field(default=None, alias="analysisStartTime")
    analysis_end_time: Optional[datetime] = Field(default=None, alias="analysisEndTime")

    @field_validator("analysis_start_time", "analysis_end_time", mode="before")
    @classmethod
    def _normalise_timestamp(cls, value: Any) -> Any:
        return _trim_fraction(value)


class ArchiveInfo(_ResponseModel):
    """Metadata about the archive the backend built from the analysed files."""

    archive_file_name: Optional[str] = Field(default=None, alias="archiveFileName")
    archive_file_size_bytes: Optional[int] = Field(default=None, alias="archiveFileSizeBytes", ge=0)
    archived_file_count: Optional[int] = Field(default=None, alias="archivedFileCount", ge=0)
    archived_file_names: Optional[List[str]] = Field(default=None, alias="archivedFileNames")
    compression_method: Optional[str] = Field(default=None, alias="compressionMethod")
    compression_ratio: Optional[float] = Field(default=None, alias="compressionRatio")
    archive_processing_time_millis: Optional[float] = Field(
        default=None, alias="archiveProcessingTimeMillis", ge=0
    )
    archive_start_time: Optional[datetime] = Field(default=None, alias="archiveStartTime")
    archive_end_time: Optional[datetime] = Field(default=None, alias="archiveEndTime")
    thread_name: Optional[str] = Field(default=None, alias="threadName")

    @field_validator("archive_start_time", "archive_end_time", mode="before")
    @classmethod
    def _normalise_timestamp(cls, value: Any) -> Any:
        return _trim_fraction(value)


class AnalysisResult(_ResponseModel):
    """Validated body of an upload-and-analyze response."""

    total_result: TotalResult = Field(alias="totalResult")
    archive_info: Optional[ArchiveInfo] = Field(default=None, alias="archiveInfo")

    @property
    def archive_file_name(self) -> Optional[str]:
        """Name to request from the download endpoint, or None when no archive was built."""
        if self.archive_info is None:
            return None
        return self.archive_info.archive_file_name or None


def interpret(raw: Any) -> AnalysisResult:
    """Validate a decoded response body and return the typed analysis result.

    Unknown fields are ignored and ``archiveInfo`` may be missing or null.
    Anything else that does not fit the contract raises :class:`SchemaError`.
    """
    if not isinstance(raw, Mapping):
        raise SchemaError(f"Expected a JSON object, got {type(raw).__name__}")
    try:
        return AnalysisResult.model_validate(dict(raw))
    except PydanticValidationError as exc:
        raise SchemaError(_describe_validation_error(exc)) from exc


def _describe_validation_error(exc: PydanticValidationError) -> str:
    problems = []
    for error in exc.errors():
        location = ".".join(str(part) for part in error.get("loc", ())) or "body"
        problems.append(f"{location}: {error.get('msg', 'invalid value')}")
    return "Unexpected analysis response: " + "; ".join(problems)


def format_byte_size(size: float) -> str:
    """Render a byte count with base-1024 units and two decimals."""
    if size < 0:
        raise ValueError(f"Byte size cannot be negative: {size}")
    if size == 0:
        return "0 Bytes"
    index = 0
    scaled = float(size)
    while scaled >= 1024 and index < len(BYTE_UNITS) - 1:
        scaled /= 1024
        index += 1
    return f"{scaled:.2f} {BYTE_UNITS[index]}"


def format_millis(value: Optional[float]) -> str:
    if value is None:
        return MISSING_PLACEHOLDER
    return f"{value:.2f}"


def format_timestamp(value: Optional[datetime]) -> str:
    if value is None:
        return MISSING_PLACEHOLDER
    return value.isoformat(sep=" ")
