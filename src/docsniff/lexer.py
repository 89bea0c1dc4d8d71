"""PHP lexer: converts source text into a flat, paired token stream."""

from __future__ import annotations

import dataclasses
import re
from enum import Enum, auto
from typing import Any

from docsniff.errors import LexError
from docsniff.tokens import (
    EMPTY_TOKENS,
    KEYWORDS,
    SCOPE_OWNERS,
    Token,
    TokenType,
    is_word_char,
    is_word_start,
)

# Longest first so that greedy matching picks "<=>" over "<="
_MULTI_CHAR_OPERATORS = (
    "<=>",
    "**=",
    "...",
    "<<=",
    ">>=",
    "===",
    "!==",
    "??=",
    "?->",
    "->",
    "=>",
    "::",
    "==",
    "!=",
    "<>",
    "<=",
    ">=",
    "&&",
    "||",
    "++",
    "--",
    "+=",
    "-=",
    "*=",
    "/=",
    ".=",
    "%=",
    "&=",
    "|=",
    "^=",
    "<<",
    ">>",
    "??",
    "**",
)

_PUNCTUATION = {
    "{": TokenType.OPEN_CURLY_BRACKET,
    "}": TokenType.CLOSE_CURLY_BRACKET,
    "(": TokenType.OPEN_PARENTHESIS,
    ")": TokenType.CLOSE_PARENTHESIS,
    "[": TokenType.OPEN_SQUARE_BRACKET,
    "]": TokenType.CLOSE_SQUARE_BRACKET,
    ";": TokenType.SEMICOLON,
    ",": TokenType.COMMA,
    "=": TokenType.EQUAL,
    "&": TokenType.BITWISE_AND,
    "?": TokenType.NULLABLE,
    ":": TokenType.COLON,
    "...": TokenType.ELLIPSIS,
}

_OPENERS = {
    TokenType.OPEN_CURLY_BRACKET: TokenType.CLOSE_CURLY_BRACKET,
    TokenType.OPEN_PARENTHESIS: TokenType.CLOSE_PARENTHESIS,
    TokenType.OPEN_SQUARE_BRACKET: TokenType.CLOSE_SQUARE_BRACKET,
    TokenType.ATTRIBUTE: TokenType.CLOSE_SQUARE_BRACKET,
}
_CLOSERS = frozenset(_OPENERS.values())

# Member access: a keyword after one of these is just a name
_MEMBER_OPERATORS = frozenset({"->", "?->", "::"})

# <<<EOT, <<<"EOT" (heredoc) or <<<'EOT' (nowdoc), then the end of the line
_HEREDOC_START = re.compile(
    r"<<<[ \t]*(['\"]?)([A-Za-z_\x80-\U0010ffff][A-Za-z0-9_\x80-\U0010ffff]*)\1\r?\n"
)


class _State(Enum):
    HTML = auto()
    PHP = auto()


class Lexer:
    """Tokenize PHP source text into a tuple of Token objects."""

    def __init__(self, source: str, filename: str = "input.php") -> None:
        self._source = source
        self._filename = filename
        self._pos = 0
        self._line = 1
        self._col = 1
        self._tokens: list[Token] = []
        self._state = _State.HTML

    def tokenize(self) -> tuple[Token, ...]:
        """Tokenize the full source, resolve pairings and return the tokens."""
        while self._pos < len(self._source):
            if self._state == _State.HTML:
                self._lex_html()
            else:
                self._lex_php()
        return _pair_tokens(self._tokens, self._source)

    # ------------------------------------------------------------------
    # Position helpers
    # ------------------------------------------------------------------

    def _peek(self, offset: int = 0) -> str:
        idx = self._pos + offset
        if idx < len(self._source):
            return self._source[idx]
        return ""

    def _startswith(self, text: str) -> bool:
        return self._source.startswith(text, self._pos)

    def _advance(self) -> str:
        ch = self._source[self._pos]
        self._pos += 1
        if ch == "\n":
            self._line += 1
            self._col = 1
        else:
            self._col += 1
        return ch

    def _take(self, count: int) -> str:
        return "".join(self._advance() for _ in range(count))

    def _emit(self, tt: TokenType, content: str, line: int, column: int) -> int:
        self._tokens.append(Token(tt, content, line, column))
        return len(self._tokens) - 1

    def _error(self, message: str, line: int | None = None, column: int | None = None) -> LexError:
        if line is None or column is None:
            line, column = self._line, self._col
        return LexError(message, line, column, self._source)

    def _last_significant(self) -> Token | None:
        for tok in reversed(self._tokens):
            if tok.type not in EMPTY_TOKENS:
                return tok
        return None

    # ------------------------------------------------------------------
    # Inline HTML
    # ------------------------------------------------------------------

    def _lex_html(self) -> None:
        line, col = self._line, self._col
        idx = self._source.find("<?", self._pos)
        if idx == -1:
            self._emit(TokenType.INLINE_HTML, self._take(len(self._source) - self._pos), line, col)
            return

        if idx > self._pos:
            self._emit(TokenType.INLINE_HTML, self._take(idx - self._pos), line, col)
            line, col = self._line, self._col

        if self._source[idx : idx + 5].lower() == "<?php":
            text = self._take(5)
        elif self._startswith("<?="):
            text = self._take(3)
        else:
            text = self._take(2)
        self._emit(TokenType.OPEN_TAG, text, line, col)
        self._state = _State.PHP

    # ------------------------------------------------------------------
    # PHP code
    # ------------------------------------------------------------------

    def _lex_php(self) -> None:
        ch = self._peek()
        line, col = self._line, self._col

        if ch in " \t\r\n":
            self._lex_whitespace()
            return

        if self._startswith("?>"):
            self._emit(TokenType.CLOSE_TAG, self._take(2), line, col)
            self._state = _State.HTML
            return

        if self._startswith("#["):
            self._emit(TokenType.ATTRIBUTE, self._take(2), line, col)
            return

        if ch == "#" or self._startswith("//"):
            self._lex_line_comment()
            return

        if self._startswith("/**") and self._peek(3) != "/":
            self._lex_doc_comment()
            return

        if self._startswith("/*"):
            self._lex_block_comment()
            return

        if ch == "$" and is_word_start(self._peek(1) or " "):
            self._advance()
            self._emit(TokenType.VARIABLE, "$" + self._read_word(), line, col)
            return

        if ch in "'\"`":
            self._lex_string(ch)
            return

        if ch.isdigit() or (ch == "." and self._peek(1).isdigit()):
            self._lex_number()
            return

        if is_word_start(ch):
            self._lex_word()
            return

        if self._startswith("<<<") and self._lex_heredoc():
            return

        for op in _MULTI_CHAR_OPERATORS:
            if self._startswith(op):
                self._emit(_PUNCTUATION.get(op, TokenType.OPERATOR), self._take(len(op)), line, col)
                return

        self._advance()
        self._emit(_PUNCTUATION.get(ch, TokenType.OPERATOR), ch, line, col)

    def _lex_whitespace(self) -> None:
        line, col = self._line, self._col
        chars = []
        while self._pos < len(self._source) and self._peek() in " \t\r\n":
            chars.append(self._advance())
        self._emit(TokenType.WHITESPACE, "".join(chars), line, col)

    def _read_word(self) -> str:
        chars = []
        while self._pos < len(self._source) and is_word_char(self._peek()):
            chars.append(self._advance())
        return "".join(chars)

    def _lex_word(self) -> None:
        line, col = self._line, self._col
        word = self._read_word()
        tt = KEYWORDS.get(word.lower(), TokenType.STRING)
        if tt is not TokenType.STRING:
            prev = self._last_significant()
            # Member names, declared names and "use function" imports
            if prev is not None and (
                prev.content in _MEMBER_OPERATORS
                or prev.type in SCOPE_OWNERS
                or (prev.type == TokenType.USE and tt == TokenType.FUNCTION)
            ):
                tt = TokenType.STRING
        self._emit(tt, word, line, col)

    def _lex_number(self) -> None:
        line, col = self._line, self._col
        chars = []
        while self._pos < len(self._source):
            ch = self._peek()
            if ch.isalnum() or ch == "_":
                chars.append(self._advance())
            elif ch == "." and self._peek(1).isdigit() and "." not in chars:
                chars.append(self._advance())
            elif ch in "+-" and chars and chars[-1] in "eE" and not _is_hex(chars):
                chars.append(self._advance())
            else:
                break
        text = "".join(chars)
        is_float = "." in text or (not _is_hex(chars) and ("e" in text or "E" in text))
        self._emit(TokenType.DNUMBER if is_float else TokenType.LNUMBER, text, line, col)

    def _lex_string(self, quote: str) -> None:
        line, col = self._line, self._col
        chars = [self._advance()]
        while self._pos < len(self._source):
            ch = self._advance()
            chars.append(ch)
            if ch == "\\" and self._pos < len(self._source):
                chars.append(self._advance())
            elif ch == quote:
                self._emit(TokenType.CONSTANT_ENCAPSED_STRING, "".join(chars), line, col)
                return
        raise self._error("unterminated string literal", line, col)

    def _lex_heredoc(self) -> bool:
        """Lex a heredoc or nowdoc through its closing label as one string token."""
        match = _HEREDOC_START.match(self._source, self._pos)
        if match is None:
            return False
        label = match.group(2)
        closer = re.compile(
            r"^[ \t]*" + re.escape(label) + r"(?![A-Za-z0-9_\x80-\U0010ffff])", re.MULTILINE
        )
        end = closer.search(self._source, match.end())
        if end is None:
            raise self._error("unterminated heredoc")
        line, col = self._line, self._col
        self._emit(TokenType.CONSTANT_ENCAPSED_STRING, self._take(end.end() - self._pos), line, col)
        return True

    # ------------------------------------------------------------------
    # Comments
    # ------------------------------------------------------------------

    def _lex_line_comment(self) -> None:
        line, col = self._line, self._col
        chars = []
        while self._pos < len(self._source):
            if self._peek() in "\r\n" or self._startswith("?>"):
                break
            chars.append(self._advance())
        self._emit(TokenType.COMMENT, "".join(chars), line, col)

    def _lex_block_comment(self) -> None:
        line, col = self._line, self._col
        end = self._source.find("*/", self._pos + 2)
        if end == -1:
            raise self._error("unterminated comment", line, col)
        self._emit(TokenType.COMMENT, self._take(end + 2 - self._pos), line, col)

    def _lex_doc_comment(self) -> None:
        """Split a /** ... */ block into open, star, tag, string, whitespace and close tokens."""
        line, col = self._line, self._col
        end = self._source.find("*/", self._pos + 3)
        if end == -1:
            raise self._error("unterminated doc comment", line, col)

        opener = self._emit(TokenType.DOC_COMMENT_OPEN_TAG, self._take(3), line, col)
        tags: list[int] = []
        line_start = True

        while self._pos < end:
            ch = self._peek()
            line, col = self._line, self._col

            if ch in "\r\n":
                newline = self._take(2 if self._startswith("\r\n") else 1)
                self._emit(TokenType.DOC_COMMENT_WHITESPACE, newline, line, col)
                line_start = True
            elif ch in " \t":
                chars = []
                while self._pos < end and self._peek() in " \t":
                    chars.append(self._advance())
                self._emit(TokenType.DOC_COMMENT_WHITESPACE, "".join(chars), line, col)
            elif ch == "*" and line_start:
                self._emit(TokenType.DOC_COMMENT_STAR, self._advance(), line, col)
            elif ch == "@" and line_start:
                chars = [self._advance()]
                while self._pos < end and self._peek() not in " \t\r\n":
                    chars.append(self._advance())
                tags.append(self._emit(TokenType.DOC_COMMENT_TAG, "".join(chars), line, col))
                line_start = False
            else:
                stop = end
                for terminator in ("\n", "\r"):
                    idx = self._source.find(terminator, self._pos, end)
                    if idx != -1:
                        stop = min(stop, idx)
                text = self._source[self._pos : stop].rstrip(" \t")
                self._emit(TokenType.DOC_COMMENT_STRING, self._take(len(text)), line, col)
                line_start = False

        line, col = self._line, self._col
        closer = self._emit(TokenType.DOC_COMMENT_CLOSE_TAG, self._take(2), line, col)
        self._tokens[opener] = dataclasses.replace(
            self._tokens[opener], comment_closer=closer, comment_tags=tuple(tags)
        )
        self._tokens[closer] = dataclasses.replace(self._tokens[closer], comment_opener=opener)


def _is_hex(chars: list[str]) -> bool:
    return len(chars) > 1 and chars[0] == "0" and chars[1] in "xX"


# ----------------------------------------------------------------------
# Pairing pass
# ----------------------------------------------------------------------


def _next_significant(tokens: list[Token], start: int) -> int | None:
    for i in range(start, len(tokens)):
        if tokens[i].type not in EMPTY_TOKENS:
            return i
    return None


def _pair_tokens(tokens: list[Token], source: str) -> tuple[Token, ...]:
    """Classify closures and attach bracket, parenthesis and scope indices."""
    updates: dict[int, dict[str, Any]] = {}

    def update(idx: int, **fields: Any) -> None:
        updates.setdefault(idx, {}).update(fields)

    # function followed by "(" (optionally by-reference) is an anonymous function
    for i, tok in enumerate(tokens):
        if tok.type not in (TokenType.FUNCTION, TokenType.FN):
            continue
        nxt = _next_significant(tokens, i + 1)
        if nxt is not None and tokens[nxt].type == TokenType.BITWISE_AND:
            nxt = _next_significant(tokens, nxt + 1)
        opens_params = nxt is not None and tokens[nxt].type == TokenType.OPEN_PARENTHESIS
        if tok.type == TokenType.FUNCTION and opens_params:
            tokens[i] = dataclasses.replace(tok, type=TokenType.CLOSURE)
        elif tok.type == TokenType.FN and not opens_params:
            tokens[i] = dataclasses.replace(tok, type=TokenType.STRING)

    # Bracket matching
    stack: list[int] = []
    for i, tok in enumerate(tokens):
        if tok.type in _OPENERS:
            stack.append(i)
        elif tok.type in _CLOSERS:
            if not stack or _OPENERS[tokens[stack[-1]].type] != tok.type:
                raise LexError(f"unmatched '{tok.content}'", tok.line, tok.column, source)
            opener = stack.pop()
            if tok.type == TokenType.CLOSE_PARENTHESIS:
                update(opener, parenthesis_opener=opener, parenthesis_closer=i)
                update(i, parenthesis_opener=opener, parenthesis_closer=i)
            else:
                update(opener, bracket_opener=opener, bracket_closer=i)
                update(i, bracket_opener=opener, bracket_closer=i)
    if stack:
        tok = tokens[stack[-1]]
        raise LexError(f"unclosed '{tok.content}'", tok.line, tok.column, source)

    def closer_of(idx: int, field: str) -> int:
        return updates[idx][field]

    # Scope owners: the first "{" outside parentheses, unless a ";" comes first
    for i, tok in enumerate(tokens):
        if tok.type not in SCOPE_OWNERS:
            continue
        has_params = tok.type not in (TokenType.FUNCTION, TokenType.CLOSURE)
        j = i + 1
        while j < len(tokens):
            tt = tokens[j].type
            if tt == TokenType.OPEN_PARENTHESIS:
                closer = closer_of(j, "parenthesis_closer")
                if not has_params:
                    update(i, parenthesis_opener=j, parenthesis_closer=closer)
                    has_params = True
                j = closer + 1
                continue
            if tt == TokenType.OPEN_CURLY_BRACKET:
                closer = closer_of(j, "bracket_closer")
                update(i, scope_opener=j, scope_closer=closer)
                update(j, scope_opener=j, scope_closer=closer)
                update(closer, scope_opener=j, scope_closer=closer)
                break
            if tt in (TokenType.SEMICOLON, TokenType.CLOSE_CURLY_BRACKET):
                break
            j += 1

    for idx, fields in updates.items():
        tokens[idx] = dataclasses.replace(tokens[idx], **fields)
    return tuple(tokens)


def tokenize(source: str, filename: str = "input.php") -> tuple[Token, ...]:
    """Convenience function: tokenize source text and return the token tuple."""
    return Lexer(source, filename).tokenize()
