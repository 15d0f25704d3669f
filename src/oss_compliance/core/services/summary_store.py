from __future__ import annotations

from typing import Callable, Optional

from ..domain.models import ResultPatch, ValidationSummary

Listener = Callable[[ValidationSummary], None]


class SummaryStore:
    """Holds the current ValidationSummary and folds patches into it.

    Every run starts with ``begin()`` which hands out a new generation id.
    Writes tagged with any other generation are dropped, so a superseded run
    can never overwrite the summary of the run that replaced it.
    """

    def __init__(self) -> None:
        self._generation = 0
        self._summary: Optional[ValidationSummary] = None
        self._listeners: list[Listener] = []

    @property
    def generation(self) -> int:
        return self._generation

    def begin(self) -> int:
        self._generation += 1
        self._summary = None
        return self._generation

    def is_current(self, generation: int) -> bool:
        return generation == self._generation

    def snapshot(self) -> Optional[ValidationSummary]:
        return self._summary

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        """Register a listener called after every accepted change.

        Returns:
            A function that removes the listener
        """
        self._listeners.append(listener)
        return lambda: self._listeners.remove(listener)

    def publish(self, generation: int, summary: ValidationSummary) -> bool:
        if not self.is_current(generation):
            return False
        self._set(summary)
        return True

    def apply(self, patch: ResultPatch) -> bool:
        """Merge one result into the current summary; other keys are untouched."""
        if not self.is_current(patch.generation) or self._summary is None:
            return False
        self._set(self._summary.with_result(patch.path, patch.result))
        return True

    def add_notice(self, generation: int, notice: str) -> bool:
        if not self.is_current(generation) or self._summary is None:
            return False
        self._set(self._summary.with_notice(notice))
        return True

    def _set(self, summary: ValidationSummary) -> None:
        self._summary = summary
        for listener in list(self._listeners):
            listener(summary)
