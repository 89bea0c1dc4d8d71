"""Error types with formatted source context."""

from __future__ import annotations


def format_snippet(
    label: str,
    message: str,
    line: int,
    column: int,
    source: str,
    filename: str,
    width: int = 1,
) -> str:
    """Render a message with a gutter, the offending source line and a caret underline."""
    lines = source.splitlines(keepends=True)
    line_idx = line - 1

    # Build the source line (strip trailing newline for display)
    if 0 <= line_idx < len(lines):
        source_line = lines[line_idx].rstrip("\n").rstrip("\r")
    else:
        source_line = ""

    # Underline at least 1 char, but stay within the line
    underline_len = max(1, min(width, len(source_line) - column + 1))

    pad = " " * (column - 1)
    carets = "^" * underline_len

    line_num = str(line)
    gutter_width = len(line_num) + 1

    blank_gutter = " " * gutter_width + "|"
    line_gutter = f"{line_num:>{gutter_width - 1}} |"

    return (
        f"{label}: {message}\n"
        f"{' ' * gutter_width}--> {filename}:{line}:{column}\n"
        f"{blank_gutter}\n"
        f"{line_gutter} {source_line}\n"
        f"{blank_gutter} {pad}{carets}"
    )


class LexError(Exception):
    """Raised on the first lexing error, with position and source context."""

    def __init__(self, message: str, line: int, column: int, source: str) -> None:
        self.message = message
        self.line = line
        self.column = column
        self.source = source
        super().__init__(self.format())

    def format(self, filename: str = "input.php") -> str:
        return format_snippet("error", self.message, self.line, self.column, self.source, filename, 2)


class TokenStreamError(Exception):
    """Raised when a token stream breaks a pairing invariant the rules rely on.

    This is a tokenizer contract bug, never a problem with the scanned code.
    """

    def __init__(self, message: str, index: int) -> None:
        self.message = message
        self.index = index
        super().__init__(f"{message} (token {index})")
