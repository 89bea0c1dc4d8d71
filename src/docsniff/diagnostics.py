"""Diagnostic records emitted by rules."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

from docsniff.errors import format_snippet


class Severity(Enum):
    ERROR = "error"
    WARNING = "warning"


@dataclass(frozen=True, slots=True)
class Diagnostic:
    """A single rule violation at a token position.

    ``template`` uses printf-style ``%s`` placeholders filled from ``args``.
    """

    position: int
    line: int
    column: int
    template: str
    code: str
    severity: Severity
    args: tuple[str, ...] = ()
    source: str = "FunctionComment"

    @property
    def message(self) -> str:
        if not self.args:
            return self.template
        return self.template % self.args

    @property
    def full_code(self) -> str:
        return f"{self.source}.{self.code}"

    def format(self, source: str, filename: str = "input.php") -> str:
        """Render the diagnostic with a source snippet, like a compiler error."""
        return format_snippet(
            self.severity.value,
            f"{self.message} [{self.full_code}]",
            self.line,
            self.column,
            source,
            filename,
        )
