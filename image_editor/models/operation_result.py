from __future__ import annotations
from dataclasses import dataclass
from typing import Any

from .errors import EditorError


@dataclass
class OperationResult:
    """
    Outcome of one ImageEditor operation: either a value or a reported error.
    """
    value: Any = None
    error: EditorError | None = None

    @property
    def ok(self) -> bool:
        return self.error is None

    @property
    def kind(self) -> str | None:
        return self.error.kind if self.error is not None else None

    @property
    def message(self) -> str | None:
        return self.error.message if self.error is not None else None

    def __bool__(self) -> bool:
        return self.ok
