"""File selection bookkeeping for the single and multiple upload modes."""

from __future__ import annotations

from dataclasses import replace
from typing import Callable, Iterable, List

from core.models import SelectedFile, SelectionState, UploadMode
from services.logger import get_logger


logger = get_logger("selection")

SelectionListener = Callable[[SelectionState], None]


def apply_mode(state: SelectionState, mode: UploadMode) -> SelectionState:
    """Switch the upload mode while keeping the chosen files."""
    return replace(state, mode=UploadMode(mode))


def apply_selection(state: SelectionState, new_files: Iterable[SelectedFile]) -> SelectionState:
    """Combine a fresh selection with the current one according to the mode."""
    incoming = tuple(new_files)
    if state.mode == UploadMode.SINGLE:
        return replace(state, files=incoming[:1])
    return replace(state, files=state.files + incoming)


def apply_clear(state: SelectionState) -> SelectionState:
    return replace(state, files=())


class FileSelectionManager:
    """Own the user's file selection and notify listeners whenever it changes."""

    def __init__(self, mode: UploadMode = UploadMode.SINGLE) -> None:
        self._state = SelectionState(mode=UploadMode(mode))
        self._listeners: List[SelectionListener] = []

    @property
    def state(self) -> SelectionState:
        return self._state

    @property
    def mode(self) -> UploadMode:
        return self._state.mode

    @property
    def files(self):
        return self._state.files

    def subscribe(self, listener: SelectionListener) -> None:
        """Register a callback invoked with the new state after each selection change."""
        self._listeners.append(listener)

    def set_mode(self, mode: UploadMode) -> None:
        self._state = apply_mode(self._state, mode)
        logger.debug("Upload mode set to %s", self._state.mode.value)

    def select_files(self, new_files: Iterable[SelectedFile]) -> SelectionState:
        """Record a selection event coming from either the file dialog or a drop."""
        incoming = list(new_files)
        self._state = apply_selection(self._state, incoming)
        logger.info(
            "Selected %d file(s) in %s mode, %d now queued",
            len(incoming),
            self._state.mode.value,
            len(self._state.files),
        )
        self._notify()
        return self._state

    def clear(self) -> None:
        self._state = apply_clear(self._state)
        logger.info("Selection cleared")
        self._notify()

    def _notify(self) -> None:
        for listener in list(self._listeners):
            listener(self._state)
