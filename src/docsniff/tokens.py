"""Token types, the token record, and shared token-kind sets."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum, auto


class TokenType(Enum):
    # Outside PHP
    INLINE_HTML = auto()
    OPEN_TAG = auto()  # <?php or <?=
    CLOSE_TAG = auto()  # ?>

    WHITESPACE = auto()

    # Comments
    COMMENT = auto()  # // ..., # ..., /* ... */
    DOC_COMMENT_OPEN_TAG = auto()  # /**
    DOC_COMMENT_CLOSE_TAG = auto()  # */
    DOC_COMMENT_WHITESPACE = auto()
    DOC_COMMENT_STAR = auto()  # leading * on a doc comment line
    DOC_COMMENT_TAG = auto()  # @name
    DOC_COMMENT_STRING = auto()  # remaining text on a doc comment line

    # Declarations and keywords
    FUNCTION = auto()
    CLOSURE = auto()  # anonymous function
    FN = auto()  # arrow function
    RETURN = auto()
    USE = auto()
    CLASS = auto()
    INTERFACE = auto()
    TRAIT = auto()
    ENUM = auto()
    PUBLIC = auto()
    PROTECTED = auto()
    PRIVATE = auto()
    STATIC = auto()
    ABSTRACT = auto()
    FINAL = auto()
    READONLY = auto()
    NULL = auto()
    TRUE = auto()
    FALSE = auto()

    # Values
    STRING = auto()  # bare word: names, type hints, constants
    VARIABLE = auto()  # $name
    CONSTANT_ENCAPSED_STRING = auto()  # '...' or "..."
    LNUMBER = auto()
    DNUMBER = auto()

    # Punctuation
    OPEN_CURLY_BRACKET = auto()
    CLOSE_CURLY_BRACKET = auto()
    OPEN_PARENTHESIS = auto()
    CLOSE_PARENTHESIS = auto()
    OPEN_SQUARE_BRACKET = auto()
    CLOSE_SQUARE_BRACKET = auto()
    ATTRIBUTE = auto()  # #[
    SEMICOLON = auto()
    COMMA = auto()
    EQUAL = auto()
    BITWISE_AND = auto()
    ELLIPSIS = auto()
    NULLABLE = auto()  # ?
    COLON = auto()
    OPERATOR = auto()  # anything else


@dataclass(frozen=True, slots=True)
class Token:
    """A single lexer token with its pairing information resolved."""

    type: TokenType
    content: str
    line: int
    column: int
    scope_opener: int | None = None
    scope_closer: int | None = None
    parenthesis_opener: int | None = None
    parenthesis_closer: int | None = None
    bracket_opener: int | None = None
    bracket_closer: int | None = None
    comment_opener: int | None = None
    comment_closer: int | None = None
    comment_tags: tuple[int, ...] = ()


# Keywords that may precede a method declaration
METHOD_PREFIXES = frozenset(
    {
        TokenType.PUBLIC,
        TokenType.PROTECTED,
        TokenType.PRIVATE,
        TokenType.STATIC,
        TokenType.ABSTRACT,
        TokenType.FINAL,
        TokenType.READONLY,
    }
)

EMPTY_TOKENS = frozenset(
    {
        TokenType.WHITESPACE,
        TokenType.COMMENT,
        TokenType.DOC_COMMENT_OPEN_TAG,
        TokenType.DOC_COMMENT_CLOSE_TAG,
        TokenType.DOC_COMMENT_WHITESPACE,
        TokenType.DOC_COMMENT_STAR,
        TokenType.DOC_COMMENT_TAG,
        TokenType.DOC_COMMENT_STRING,
    }
)

# Declarations whose body braces get scope_opener/scope_closer
SCOPE_OWNERS = frozenset(
    {
        TokenType.FUNCTION,
        TokenType.CLOSURE,
        TokenType.CLASS,
        TokenType.INTERFACE,
        TokenType.TRAIT,
        TokenType.ENUM,
    }
)

KEYWORDS: dict[str, TokenType] = {
    "function": TokenType.FUNCTION,
    "fn": TokenType.FN,
    "return": TokenType.RETURN,
    "use": TokenType.USE,
    "class": TokenType.CLASS,
    "interface": TokenType.INTERFACE,
    "trait": TokenType.TRAIT,
    "enum": TokenType.ENUM,
    "public": TokenType.PUBLIC,
    "protected": TokenType.PROTECTED,
    "private": TokenType.PRIVATE,
    "static": TokenType.STATIC,
    "abstract": TokenType.ABSTRACT,
    "final": TokenType.FINAL,
    "readonly": TokenType.READONLY,
    "null": TokenType.NULL,
    "true": TokenType.TRUE,
    "false": TokenType.FALSE,
}


def is_word_start(ch: str) -> bool:
    """Return True if ch can start a PHP label."""
    return ch.isalpha() or ch == "_" or ch == "\\" or ord(ch) >= 0x80


def is_word_char(ch: str) -> bool:
    """Return True if ch can continue a PHP label (namespaces included)."""
    return ch.isalnum() or ch == "_" or ch == "\\" or ord(ch) >= 0x80
