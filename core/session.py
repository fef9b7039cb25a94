"""Upload-and-analyze session: request building, state reducers, and orchestration.

Network work is handed to an injected dispatcher so the session itself never
blocks. Every attempt carries an id; only the outcome of the most recently
started attempt may settle the session, whatever order responses arrive in.
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from typing import Any, Callable, List, Optional, Tuple

from core.models import (
    ANALYZE_MULTIPLE_PATH,
    ANALYZE_SINGLE_PATH,
    AnalyzerError,
    SelectedFile,
    SelectionState,
    SessionStatus,
    UploadMode,
    ValidationError,
)
from core.results import AnalysisResult, interpret
from services.logger import get_logger


logger = get_logger("session")


@dataclass(frozen=True)
class UploadRequest:
    """Endpoint and multipart layout for one analysis request."""

    endpoint: str
    field_name: str
    files: Tuple[SelectedFile, ...]


def build_upload_request(selection: SelectionState) -> UploadRequest:
    """Shape the request for the selection's mode; single mode sends only the first file."""
    if selection.is_empty:
        raise ValidationError("no files selected")
    if selection.mode == UploadMode.SINGLE:
        return UploadRequest(ANALYZE_SINGLE_PATH, "file", selection.files[:1])
    return UploadRequest(ANALYZE_MULTIPLE_PATH, "files", tuple(selection.files))


@dataclass(frozen=True)
class JobOutcome:
    """Result of a background job: either a value or the error it raised."""

    value: Any = None
    error: Optional[AnalyzerError] = None

    @property
    def ok(self) -> bool:
        return self.error is None


def run_job(job: Callable[[], Any]) -> JobOutcome:
    """Run ``job`` and capture any failure so callers always receive an outcome."""
    try:
        return JobOutcome(value=job())
    except AnalyzerError as exc:
        return JobOutcome(error=exc)
    except Exception as exc:  # pylint: disable=broad-except
        logger.exception("Background job failed unexpectedly: %s", exc)
        return JobOutcome(error=AnalyzerError(f"Unexpected error: {exc}"))


Dispatcher = Callable[[Callable[[], Any], Callable[[JobOutcome], None]], None]


def dispatch_inline(job: Callable[[], Any], callback: Callable[[JobOutcome], None]) -> None:
    """Run the job synchronously on the calling thread."""
    callback(run_job(job))


@dataclass(frozen=True)
class SessionState:
    """Immutable snapshot of the session lifecycle."""

    status: SessionStatus = SessionStatus.IDLE
    attempt_id: int = 0
    result: Optional[AnalysisResult] = None
    error: Optional[AnalyzerError] = None

    @property
    def error_message(self) -> Optional[str]:
        return str(self.error) if self.error is not None else None


def begin_attempt(state: SessionState) -> SessionState:
    """Enter UPLOADING under a fresh attempt id, dropping any previous outcome."""
    return SessionState(status=SessionStatus.UPLOADING, attempt_id=state.attempt_id + 1)


def settle_attempt(state: SessionState, attempt_id: int, outcome: JobOutcome) -> SessionState:
    """Apply an attempt's outcome, ignoring it unless it belongs to the live attempt."""
    if attempt_id != state.attempt_id or state.status != SessionStatus.UPLOADING:
        return state
    if outcome.error is not None:
        return replace(state, status=SessionStatus.FAILED, error=outcome.error)
    return replace(state, status=SessionStatus.SUCCEEDED, result=outcome.value)


def reset_state(state: SessionState) -> SessionState:
    return SessionState(attempt_id=state.attempt_id)


SessionListener = Callable[[SessionState], None]


class UploadSession:
    """Drive upload-and-analyze attempts and publish each state transition."""

    def __init__(self, api_client, dispatcher: Dispatcher = dispatch_inline) -> None:
        self._api_client = api_client
        self._dispatch = dispatcher
        self._state = SessionState()
        self._listeners: List[SessionListener] = []

    @property
    def state(self) -> SessionState:
        return self._state

    @property
    def result(self) -> Optional[AnalysisResult]:
        return self._state.result

    @property
    def archive_file_name(self) -> Optional[str]:
        """Download reference of the current result, if the backend built an archive."""
        if self._state.status != SessionStatus.SUCCEEDED or self._state.result is None:
            return None
        return self._state.result.archive_file_name

    def subscribe(self, listener: SessionListener) -> None:
        self._listeners.append(listener)

    def set_api_client(self, api_client) -> None:
        """Swap the transport used by future attempts (e.g., after settings changes)."""
        self._api_client = api_client

    def start(self, selection: SelectionState) -> SessionState:
        """Begin a new attempt for ``selection``; any attempt still in flight is superseded."""
        request = build_upload_request(selection)
        if len(selection.files) > len(request.files):
            logger.warning(
                "Single mode sends only %s; %d other selected file(s) are ignored",
                request.files[0].name,
                len(selection.files) - len(request.files),
            )

        if self._state.status == SessionStatus.UPLOADING:
            logger.info("Attempt %d superseded before completion", self._state.attempt_id)
        self._set_state(begin_attempt(self._state))
        attempt_id = self._state.attempt_id
        api_client = self._api_client
        logger.info(
            "Attempt %d started: %d file(s) in %s mode",
            attempt_id,
            len(request.files),
            selection.mode.value,
        )

        self._dispatch(
            lambda: interpret(api_client.post_files(request)),
            lambda outcome: self._settle(attempt_id, outcome),
        )
        return self._state

    def reset(self) -> None:
        """Return to IDLE and discard any result, error, or pending attempt."""
        if self._state.status == SessionStatus.IDLE:
            return
        self._set_state(reset_state(self._state))

    def _settle(self, attempt_id: int, outcome: JobOutcome) -> None:
        new_state = settle_attempt(self._state, attempt_id, outcome)
        if new_state is self._state:
            logger.info(
                "Ignoring stale response for attempt %d (current attempt %d, %s)",
                attempt_id,
                self._state.attempt_id,
                self._state.status.value,
            )
            return
        if new_state.status == SessionStatus.FAILED:
            logger.warning("Attempt %d failed: %s", attempt_id, new_state.error_message)
        else:
            total = new_state.result.total_result
            logger.info(
                "Attempt %d succeeded: %d file(s), %d lines, %d characters",
                attempt_id,
                total.total_processed_files,
                total.total_line_count,
                total.total_character_count,
            )
        self._set_state(new_state)

    def _set_state(self, state: SessionState) -> None:
        self._state = state
        for listener in list(self._listeners):
            listener(state)


def bind_selection(selection, session: UploadSession) -> None:
    """Reset ``session`` whenever ``selection`` changes so a stale result is never shown."""
    selection.subscribe(lambda _state: session.reset())
