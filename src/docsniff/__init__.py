"""Doc comment checker for PHP function declarations."""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from docsniff.files import SourceFile
    from docsniff.rule import FunctionCommentRule

__version__ = "0.1.0"


def check(
    source: str,
    filename: str = "input.php",
    rule: FunctionCommentRule | None = None,
) -> SourceFile:
    """Tokenize PHP source and run the function comment rule over it."""
    from docsniff.files import SourceFile
    from docsniff.rule import check_file

    return check_file(SourceFile(source, filename), rule)
