"""Shared fixtures: analysis payloads shaped like the service's JSON responses."""

import copy
import os

import pytest


BASE_PAYLOAD = {
    "totalResult": {
        "totalProcessedFiles": 2,
        "totalLineCount": 10,
        "totalCharacterCount": 120,
        "totalProcessingTimeMillis": 3.25,
        "successfulFileCount": 2,
        "failedFileCount": 0,
        "analysisStartTime": "2024-05-01T10:00:00.123456789",
        "analysisEndTime": "2024-05-01T10:00:00.126706789",
        "fileStatsList": [
            {
                "fileName": "notes.txt",
                "lineCount": 4,
                "characterCount": 50,
                "processingTimeNanos": 1250000,
                "processingTimeMillis": 1.25,
                "processingStartTime": "2024-05-01T10:00:00.1234",
                "processingEndTime": "2024-05-01T10:00:00.124650",
                "threadName": "file-analyzer-1",
                "processingCompleted": True,
            },
            {
                "fileName": "readme.txt",
                "lineCount": 6,
                "characterCount": 70,
                "processingTimeMillis": 2.0,
                "processingStartTime": None,
                "processingEndTime": None,
                "threadName": "file-analyzer-2",
                "processingCompleted": True,
            },
        ],
    }
}

ARCHIVE_INFO = {
    "archiveFileName": "analysis_20240501_100000.zip",
    "archiveFilePath": "/srv/archives/analysis_20240501_100000.zip",
    "archiveFileSizeBytes": 2048,
    "archivedFileCount": 2,
    "archivedFileNames": ["notes.txt", "readme.txt"],
    "compressionMethod": "DEFLATE",
    "compressionRatio": 0.42,
    "archiveProcessingTimeMillis": 5.5,
    "archiveStartTime": "2024-05-01T10:00:00.2",
    "archiveEndTime": "2024-05-01T10:00:00.2055",
    "threadName": "archive-worker-1",
}


@pytest.fixture
def analysis_payload():
    """Response body without archive information."""
    return copy.deepcopy(BASE_PAYLOAD)


@pytest.fixture
def archived_payload():
    """Response body that references a generated archive."""
    payload = copy.deepcopy(BASE_PAYLOAD)
    payload["archiveInfo"] = copy.deepcopy(ARCHIVE_INFO)
    return payload


@pytest.fixture(scope="session")
def qt_app():
    """Headless QApplication shared by the tests that need an event loop or widgets."""
    os.environ.setdefault("QT_QPA_PLATFORM", "offscreen")
    from PySide6.QtWidgets import QApplication

    return QApplication.instance() or QApplication([])
