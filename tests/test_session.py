"""Tests for the upload session lifecycle and stale-response suppression."""

import pytest

from core.models import (
    ANALYZE_MULTIPLE_PATH,
    ANALYZE_SINGLE_PATH,
    HttpError,
    SchemaError,
    SelectedFile,
    SelectionState,
    SessionStatus,
    TransportError,
    UploadMode,
    ValidationError,
)
from core.selection import FileSelectionManager
from core.session import (
    JobOutcome,
    SessionState,
    UploadSession,
    begin_attempt,
    bind_selection,
    build_upload_request,
    reset_state,
    run_job,
    settle_attempt,
)


class FakeClient:
    """Stands in for the API client; answers each request through ``responder``."""

    def __init__(self, responder):
        self._responder = responder
        self.requests = []

    def post_files(self, request):
        self.requests.append(request)
        answer = self._responder(request)
        if isinstance(answer, Exception):
            raise answer
        return answer


class ManualDispatcher:
    """Holds dispatched jobs so tests decide when, and in which order, they finish."""

    def __init__(self):
        self.pending = []

    def __call__(self, job, callback):
        self.pending.append((job, callback))

    def resolve(self, index):
        job, callback = self.pending[index]
        callback(run_job(job))


def _selection(mode, *names):
    files = tuple(SelectedFile.from_bytes(name, name.encode()) for name in names)
    return SelectionState(files=files, mode=mode)


def _payload_for(analysis_payload, line_count):
    payload = dict(analysis_payload)
    payload["totalResult"] = dict(analysis_payload["totalResult"], totalLineCount=line_count)
    return payload


def test_start_with_empty_selection_raises_and_sends_nothing(analysis_payload):
    client = FakeClient(lambda request: analysis_payload)
    dispatcher = ManualDispatcher()
    session = UploadSession(client, dispatcher)

    with pytest.raises(ValidationError):
        session.start(SelectionState(mode=UploadMode.MULTIPLE))

    assert session.state.status == SessionStatus.IDLE
    assert dispatcher.pending == []
    assert client.requests == []


def test_single_mode_request_shape():
    request = build_upload_request(_selection(UploadMode.SINGLE, "a.txt", "b.txt"))

    assert request.endpoint == ANALYZE_SINGLE_PATH
    assert request.field_name == "file"
    assert [item.name for item in request.files] == ["a.txt"]


def test_multiple_mode_request_shape():
    request = build_upload_request(_selection(UploadMode.MULTIPLE, "a.txt", "b.zip", "a.txt"))

    assert request.endpoint == ANALYZE_MULTIPLE_PATH
    assert request.field_name == "files"
    assert [item.name for item in request.files] == ["a.txt", "b.zip", "a.txt"]


def test_successful_attempt(analysis_payload):
    client = FakeClient(lambda request: analysis_payload)
    session = UploadSession(client)
    seen = []
    session.subscribe(lambda state: seen.append(state.status))

    state = session.start(_selection(UploadMode.SINGLE, "a.txt"))

    assert state.status == SessionStatus.SUCCEEDED
    assert state.result.total_result.total_line_count == 10
    assert state.error is None
    assert session.archive_file_name is None
    assert seen == [SessionStatus.UPLOADING, SessionStatus.SUCCEEDED]


def test_archive_reference_exposed_after_success(archived_payload):
    session = UploadSession(FakeClient(lambda request: archived_payload))

    session.start(_selection(UploadMode.SINGLE, "a.txt"))

    assert session.archive_file_name == "analysis_20240501_100000.zip"


def test_http_error_fails_attempt():
    session = UploadSession(FakeClient(lambda request: HttpError(500, "Analysis failed")))

    state = session.start(_selection(UploadMode.SINGLE, "a.txt"))

    assert state.status == SessionStatus.FAILED
    assert isinstance(state.error, HttpError)
    assert state.error.status_code == 500
    assert state.error_message == "Analysis failed (status 500)"
    assert state.result is None


def test_invalid_body_fails_with_schema_error():
    session = UploadSession(FakeClient(lambda request: {"unexpected": True}))

    state = session.start(_selection(UploadMode.MULTIPLE, "a.txt"))

    assert state.status == SessionStatus.FAILED
    assert isinstance(state.error, SchemaError)


def test_transport_error_fails_attempt():
    session = UploadSession(FakeClient(lambda request: TransportError("connection refused")))

    state = session.start(_selection(UploadMode.SINGLE, "a.txt"))

    assert state.status == SessionStatus.FAILED
    assert str(state.error) == "connection refused"


def test_unexpected_exception_still_settles_as_failed():
    session = UploadSession(FakeClient(lambda request: RuntimeError("boom")))

    state = session.start(_selection(UploadMode.SINGLE, "a.txt"))

    assert state.status == SessionStatus.FAILED
    assert "boom" in state.error_message


def test_latest_started_attempt_wins_when_responses_arrive_out_of_order(analysis_payload):
    answers = {
        "first.txt": _payload_for(analysis_payload, 111),
        "second.txt": _payload_for(analysis_payload, 222),
    }
    client = FakeClient(lambda request: answers[request.files[0].name])
    dispatcher = ManualDispatcher()
    session = UploadSession(client, dispatcher)

    session.start(_selection(UploadMode.SINGLE, "first.txt"))
    session.start(_selection(UploadMode.SINGLE, "second.txt"))
    assert session.state.status == SessionStatus.UPLOADING

    dispatcher.resolve(1)
    dispatcher.resolve(0)

    assert session.state.status == SessionStatus.SUCCEEDED
    assert session.state.attempt_id == 2
    assert session.result.total_result.total_line_count == 222


def test_stale_failure_does_not_override_newer_attempt(analysis_payload):
    def responder(request):
        if request.files[0].name == "first.txt":
            return HttpError(503, "Service unavailable")
        return analysis_payload

    dispatcher = ManualDispatcher()
    session = UploadSession(FakeClient(responder), dispatcher)

    session.start(_selection(UploadMode.SINGLE, "first.txt"))
    session.start(_selection(UploadMode.SINGLE, "second.txt"))
    dispatcher.resolve(0)

    assert session.state.status == SessionStatus.UPLOADING

    dispatcher.resolve(1)

    assert session.state.status == SessionStatus.SUCCEEDED


def test_reset_discards_result_and_pending_attempt(analysis_payload):
    dispatcher = ManualDispatcher()
    session = UploadSession(FakeClient(lambda request: analysis_payload), dispatcher)

    session.start(_selection(UploadMode.SINGLE, "a.txt"))
    session.reset()
    dispatcher.resolve(0)

    assert session.state.status == SessionStatus.IDLE
    assert session.result is None


def test_restart_after_failure_begins_new_attempt(analysis_payload):
    answers = [HttpError(500, "Analysis failed"), analysis_payload]
    session = UploadSession(FakeClient(lambda request: answers.pop(0)))

    assert session.start(_selection(UploadMode.SINGLE, "a.txt")).status == SessionStatus.FAILED
    state = session.start(_selection(UploadMode.SINGLE, "a.txt"))

    assert state.status == SessionStatus.SUCCEEDED
    assert state.error is None
    assert state.attempt_id == 2


def test_reducers_ignore_outcomes_for_other_attempts():
    state = begin_attempt(SessionState())
    stale = settle_attempt(state, state.attempt_id - 1, JobOutcome(value="ignored"))

    assert stale is state
    assert reset_state(state).status == SessionStatus.IDLE
    assert reset_state(state).attempt_id == state.attempt_id


def test_selection_change_discards_pending_attempt(analysis_payload):
    dispatcher = ManualDispatcher()
    session = UploadSession(FakeClient(lambda request: analysis_payload), dispatcher)
    selection = FileSelectionManager(UploadMode.SINGLE)
    bind_selection(selection, session)

    selection.select_files([SelectedFile.from_bytes("a.txt", b"a")])
    session.start(selection.state)
    selection.select_files([SelectedFile.from_bytes("b.txt", b"b")])
    dispatcher.resolve(0)

    assert session.state.status == SessionStatus.IDLE
    assert session.result is None


def test_clearing_selection_discards_previous_result(analysis_payload):
    session = UploadSession(FakeClient(lambda request: analysis_payload))
    selection = FileSelectionManager(UploadMode.MULTIPLE)
    bind_selection(selection, session)
    selection.select_files([SelectedFile.from_bytes("a.txt", b"a")])

    assert session.start(selection.state).status == SessionStatus.SUCCEEDED

    selection.clear()

    assert session.state.status == SessionStatus.IDLE
    assert session.result is None
