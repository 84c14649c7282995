"""Form helpers: inline validation and record selection."""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Generic, Optional, TypeVar

T = TypeVar("T")

EMPTY_INPUT_MESSAGE = "Input cannot be empty"


def validate_text_input(value: Optional[str]) -> Optional[str]:
    """Return an inline error message for a blank required field, else ``None``."""

    if value is None or not value.strip():
        return EMPTY_INPUT_MESSAGE
    return None


@dataclass
class RecordSelection(Generic[T]):
    """Loaded records plus the index of the one currently chosen.

    Kept apart from the draft a form is editing so that typing into a new
    record never changes the selected one.
    """

    records: list[T] = field(default_factory=list)
    index: int = 0

    def selected(self) -> Optional[T]:
        if not self.records:
            return None
        return self.records[self.index]

    def select(self, index: int) -> T:
        if not 0 <= index < len(self.records):
            raise IndexError(f"no record at index {index}")
        self.index = index
        return self.records[index]

    def add(self, record: T, *, key: Optional[str] = None) -> int:
        """Append ``record`` (or replace the one sharing ``key``) and select it."""

        if key is not None:
            for idx, existing in enumerate(self.records):
                if getattr(existing, "company", None) == key:
                    self.records[idx] = record
                    self.index = idx
                    return idx
        self.records.append(record)
        self.index = len(self.records) - 1
        return self.index

    def labels(self) -> list[str]:
        return [getattr(record, "company", str(record)) for record in self.records]

    def __len__(self) -> int:
        return len(self.records)
