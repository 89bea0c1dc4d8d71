"""The scanned source file: token access, search helpers and the diagnostic sink."""

from __future__ import annotations

from collections.abc import Collection
from dataclasses import dataclass

from docsniff.diagnostics import Diagnostic, Severity
from docsniff.errors import TokenStreamError
from docsniff.lexer import tokenize
from docsniff.search import find_next, find_previous
from docsniff.tokens import EMPTY_TOKENS, METHOD_PREFIXES, Token, TokenType

_DECLARATIONS = frozenset(
    {
        TokenType.FUNCTION,
        TokenType.CLASS,
        TokenType.INTERFACE,
        TokenType.TRAIT,
        TokenType.ENUM,
    }
)


@dataclass(frozen=True, slots=True)
class MethodParameter:
    """One declared parameter of a function or method."""

    name: str
    token: int
    type_hint: str = ""


class SourceFile:
    """A tokenized PHP file plus the diagnostics and metrics recorded against it."""

    def __init__(
        self,
        source: str,
        filename: str = "input.php",
        tokens: tuple[Token, ...] | None = None,
    ) -> None:
        self.source = source
        self.filename = filename
        self.tokens = tokens if tokens is not None else tokenize(source, filename)
        self.diagnostics: list[Diagnostic] = []
        self.metrics: dict[str, dict[int, str]] = {}

    # ------------------------------------------------------------------
    # Search
    # ------------------------------------------------------------------

    def find_previous(
        self,
        types: TokenType | Collection[TokenType],
        start: int,
        end: int | None = None,
        exclude: bool = False,
        value: str | None = None,
    ) -> int | None:
        return find_previous(self.tokens, types, start, end, exclude, value)

    def find_next(
        self,
        types: TokenType | Collection[TokenType],
        start: int,
        end: int | None = None,
        exclude: bool = False,
        value: str | None = None,
    ) -> int | None:
        return find_next(self.tokens, types, start, end, exclude, value)

    def get_tokens_as_string(self, start: int, length: int) -> str:
        """Concatenate the content of *length* tokens starting at *start*."""
        return "".join(tok.content for tok in self.tokens[start : start + length])

    # ------------------------------------------------------------------
    # Declarations
    # ------------------------------------------------------------------

    def get_declaration_name(self, stack_ptr: int) -> str | None:
        """Return the declared name of a function or class-like token.

        Anonymous functions have no name and return None.
        """
        tok = self.tokens[stack_ptr]
        if tok.type == TokenType.CLOSURE:
            return None
        if tok.type not in _DECLARATIONS:
            raise TokenStreamError(f"token {tok.type.name} is not a declaration", stack_ptr)

        name_ptr = self.find_next(EMPTY_TOKENS | {TokenType.BITWISE_AND}, stack_ptr + 1, exclude=True)
        if name_ptr is None:
            return None
        name = self.tokens[name_ptr]
        if name.type in (TokenType.OPEN_PARENTHESIS, TokenType.OPEN_CURLY_BRACKET):
            return None
        return name.content

    def get_method_parameters(self, stack_ptr: int) -> list[MethodParameter]:
        """Return the declared parameters of the function at *stack_ptr*, in order."""
        tok = self.tokens[stack_ptr]
        if tok.type not in (TokenType.FUNCTION, TokenType.CLOSURE):
            raise TokenStreamError(f"token {tok.type.name} is not a function", stack_ptr)
        if tok.parenthesis_opener is None or tok.parenthesis_closer is None:
            raise TokenStreamError("function has no parameter list", stack_ptr)

        params: list[MethodParameter] = []
        segment: list[int] = []
        i = tok.parenthesis_opener + 1
        while i < tok.parenthesis_closer:
            cur = self.tokens[i]
            if cur.type == TokenType.COMMA:
                self._append_parameter(params, segment)
                segment = []
                i += 1
                continue
            segment.append(i)
            # Keep nested brackets (defaults, attributes) inside the current segment
            closer = cur.parenthesis_closer if cur.type == TokenType.OPEN_PARENTHESIS else None
            if cur.type in (TokenType.OPEN_SQUARE_BRACKET, TokenType.ATTRIBUTE):
                closer = cur.bracket_closer
            if closer is not None and closer > i:
                segment.extend(range(i + 1, closer + 1))
                i = closer + 1
                continue
            i += 1
        self._append_parameter(params, segment)
        return params

    def _append_parameter(self, params: list[MethodParameter], segment: list[int]) -> None:
        type_parts: list[str] = []
        attribute_end = -1
        for i in segment:
            cur = self.tokens[i]
            if i <= attribute_end:
                continue
            if cur.type == TokenType.ATTRIBUTE:
                attribute_end = cur.bracket_closer if cur.bracket_closer is not None else i
            elif cur.type == TokenType.VARIABLE:
                params.append(MethodParameter(cur.content, i, "".join(type_parts)))
                return
            elif cur.type in (TokenType.BITWISE_AND, TokenType.ELLIPSIS):
                continue
            elif cur.type not in EMPTY_TOKENS and cur.type not in METHOD_PREFIXES:
                type_parts.append(cur.content)

    # ------------------------------------------------------------------
    # Reporting
    # ------------------------------------------------------------------

    def add_error(
        self,
        message: str,
        position: int,
        code: str,
        args: tuple[str, ...] | list[str] = (),
        source: str = "FunctionComment",
    ) -> None:
        self._add(message, position, code, Severity.ERROR, args, source)

    def add_warning(
        self,
        message: str,
        position: int,
        code: str,
        args: tuple[str, ...] | list[str] = (),
        source: str = "FunctionComment",
    ) -> None:
        self._add(message, position, code, Severity.WARNING, args, source)

    def _add(
        self,
        message: str,
        position: int,
        code: str,
        severity: Severity,
        args: tuple[str, ...] | list[str],
        source: str,
    ) -> None:
        if not 0 <= position < len(self.tokens):
            raise TokenStreamError("diagnostic position out of range", position)
        tok = self.tokens[position]
        self.diagnostics.append(
            Diagnostic(
                position=position,
                line=tok.line,
                column=tok.column,
                template=message,
                code=code,
                severity=severity,
                args=tuple(str(a) for a in args),
                source=source,
            )
        )

    def record_metric(self, position: int, name: str, value: str) -> None:
        """Record a metric value for a token; a position is only counted once per metric."""
        self.metrics.setdefault(name, {}).setdefault(position, value)

    def metric_totals(self) -> dict[str, dict[str, int]]:
        totals: dict[str, dict[str, int]] = {}
        for name, values in self.metrics.items():
            counts = totals.setdefault(name, {})
            for value in values.values():
                counts[value] = counts.get(value, 0) + 1
        return totals

    @property
    def errors(self) -> list[Diagnostic]:
        return [d for d in self.diagnostics if d.severity == Severity.ERROR]

    @property
    def warnings(self) -> list[Diagnostic]:
        return [d for d in self.diagnostics if d.severity == Severity.WARNING]
