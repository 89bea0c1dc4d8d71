"""Locating and reading the doc comment that belongs to a function."""

from __future__ import annotations

import re
from dataclasses import dataclass

from docsniff.errors import TokenStreamError
from docsniff.files import SourceFile
from docsniff.tokens import METHOD_PREFIXES, Token, TokenType

# Tokens allowed between a doc comment and the function keyword
_COMMENT_SKIP = METHOD_PREFIXES | {TokenType.WHITESPACE}

_INHERIT_DOC = re.compile(r"{@inheritdoc}", re.IGNORECASE)


@dataclass(frozen=True, slots=True)
class DocTag:
    name: str
    index: int
    line: int


@dataclass(frozen=True, slots=True)
class DocComment:
    """Doc comment boundaries and its tags in source order.

    A plain ``//`` or ``/* */`` comment is represented with ``open_index ==
    close_index`` and no tags.
    """

    open_index: int
    close_index: int
    tags: tuple[DocTag, ...] = ()

    def tags_named(self, name: str) -> list[DocTag]:
        return [tag for tag in self.tags if tag.name == name]


def _end_line(tok: Token) -> int:
    return tok.line + tok.content.count("\n")


def locate_doc_comment(file: SourceFile, stack_ptr: int) -> int | None:
    """Return the index of the comment that ends right before the function, or None.

    A ``//`` comment sharing its line with earlier code is taken to be a closing
    remark for that code, not the function's documentation.
    """
    tokens = file.tokens
    comment_end = file.find_previous(_COMMENT_SKIP, stack_ptr - 1, exclude=True)
    if comment_end is None:
        return None

    if tokens[comment_end].type == TokenType.COMMENT:
        prev = file.find_previous(_COMMENT_SKIP, comment_end - 1, exclude=True)
        if prev is not None and _end_line(tokens[prev]) == _end_line(tokens[comment_end]):
            comment_end = prev

    if tokens[comment_end].type in (TokenType.DOC_COMMENT_CLOSE_TAG, TokenType.COMMENT):
        return comment_end
    return None


def read_doc_comment(file: SourceFile, comment_end: int) -> DocComment:
    """Build the DocComment view for a comment located by locate_doc_comment."""
    tok = file.tokens[comment_end]
    if tok.type == TokenType.COMMENT:
        return DocComment(comment_end, comment_end)
    if tok.type != TokenType.DOC_COMMENT_CLOSE_TAG:
        raise TokenStreamError(f"expected a comment, found {tok.type.name}", comment_end)

    opener = tok.comment_opener
    if opener is None or file.tokens[opener].comment_closer != comment_end:
        raise TokenStreamError("doc comment close tag has no matching opener", comment_end)

    tags = tuple(
        DocTag(file.tokens[i].content, i, file.tokens[i].line)
        for i in file.tokens[opener].comment_tags
    )
    return DocComment(opener, comment_end, tags)


def is_inherit_doc(file: SourceFile, stack_ptr: int) -> bool:
    """Return True if the nearest preceding doc comment contains {@inheritdoc}."""
    start = file.find_previous(TokenType.DOC_COMMENT_OPEN_TAG, stack_ptr - 1)
    if start is None:
        return False
    end = file.find_next(TokenType.DOC_COMMENT_CLOSE_TAG, start)
    if end is None:
        raise TokenStreamError("unterminated doc comment", start)

    content = file.get_tokens_as_string(start, end - start)
    return _INHERIT_DOC.search(content) is not None
