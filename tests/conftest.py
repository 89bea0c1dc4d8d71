"""Shared test fixtures and helpers."""

from __future__ import annotations

import pytest

from docsniff import check
from docsniff.files import SourceFile
from docsniff.lexer import tokenize
from docsniff.tokens import Token, TokenType


@pytest.fixture
def lex():
    """Return a helper that tokenizes PHP code (the open tag is added for you)."""

    def _lex(code: str) -> tuple[Token, ...]:
        return tokenize("<?php\n" + code)

    return _lex


@pytest.fixture
def php_file():
    """Return a helper that wraps PHP code in a SourceFile without checking it."""

    def _file(code: str) -> SourceFile:
        return SourceFile("<?php\n" + code, "test.php")

    return _file


@pytest.fixture
def run_check():
    """Return a helper that checks PHP code and returns the SourceFile."""

    def _check(code: str, **kwargs) -> SourceFile:
        return check("<?php\n" + code, "test.php", **kwargs)

    return _check


def assert_types(tokens: tuple[Token, ...] | list[Token], expected: list[TokenType]) -> None:
    """Assert that the token types match the expected list."""
    actual = [t.type for t in tokens]
    assert actual == expected, f"Expected {expected}, got {actual}"


def find_tokens(tokens: tuple[Token, ...], tt: TokenType) -> list[int]:
    """Return the indices of all tokens of the given type."""
    return [i for i, t in enumerate(tokens) if t.type == tt]


def first(tokens: tuple[Token, ...], tt: TokenType) -> int:
    """Return the index of the first token of the given type."""
    indices = find_tokens(tokens, tt)
    assert indices, f"no {tt.name} token"
    return indices[0]


def codes(file: SourceFile) -> list[str]:
    """Return the diagnostic codes of a checked file in report order."""
    return [d.code for d in file.diagnostics]


class RecordingValidator:
    """TagValidator that records which checks the rule delegated."""

    def __init__(self) -> None:
        self.calls: list[tuple[str, int, int]] = []

    def validate_return(self, file: SourceFile, stack_ptr: int, comment_start: int) -> None:
        self.calls.append(("return", stack_ptr, comment_start))

    def validate_throws(self, file: SourceFile, stack_ptr: int, comment_start: int) -> None:
        self.calls.append(("throws", stack_ptr, comment_start))

    def validate_params(self, file: SourceFile, stack_ptr: int, comment_start: int) -> None:
        self.calls.append(("params", stack_ptr, comment_start))

    def kinds(self) -> list[str]:
        return [kind for kind, _, _ in self.calls]
