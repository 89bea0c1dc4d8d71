"""Tests for doc comment location, reading, and {@inheritdoc} detection."""

from __future__ import annotations

import dataclasses

import pytest

from docsniff.docblock import is_inherit_doc, locate_doc_comment, read_doc_comment
from docsniff.errors import TokenStreamError
from docsniff.files import SourceFile
from docsniff.tokens import TokenType

from .conftest import find_tokens, first


def _func(file: SourceFile, nth: int = 0) -> int:
    return find_tokens(file.tokens, TokenType.FUNCTION)[nth]


class TestLocateDocComment:
    def test_doc_comment_directly_above(self, php_file):
        file = php_file("/** Doc. */\nfunction foo() {}")
        end = locate_doc_comment(file, _func(file))
        assert file.tokens[end].type == TokenType.DOC_COMMENT_CLOSE_TAG

    def test_skips_modifiers(self, php_file):
        file = php_file("class A {\n    /** Doc. */\n    final public static function foo() {}\n}")
        end = locate_doc_comment(file, _func(file))
        assert file.tokens[end].type == TokenType.DOC_COMMENT_CLOSE_TAG

    def test_plain_comment_on_its_own_line(self, php_file):
        file = php_file("$a = 1;\n// Does foo.\nfunction foo() {}")
        end = locate_doc_comment(file, _func(file))
        assert file.tokens[end].type == TokenType.COMMENT

    def test_trailing_comment_is_not_documentation(self, php_file):
        file = php_file("if ($a) {\n} // closes if\nfunction foo() {}")
        assert locate_doc_comment(file, _func(file)) is None

    def test_trailing_comment_after_doc_comment_line(self, php_file):
        # The earlier token on the same line is adopted as the boundary
        file = php_file("/** Doc. */ // note\nfunction foo() {}")
        end = locate_doc_comment(file, _func(file))
        assert file.tokens[end].type == TokenType.DOC_COMMENT_CLOSE_TAG

    def test_code_before_function(self, php_file):
        file = php_file("$a = 1;\nfunction foo() {}")
        assert locate_doc_comment(file, _func(file)) is None

    def test_first_token_in_file(self):
        file = SourceFile("<?php function foo() {}")
        func = first(file.tokens, TokenType.FUNCTION)
        assert locate_doc_comment(file, func) is None

    def test_attribute_between_comment_and_function(self, php_file):
        file = php_file("/** Doc. */\n#[Pure]\nfunction foo() {}")
        assert locate_doc_comment(file, _func(file)) is None

    def test_multiline_block_comment_after_code(self, php_file):
        file = php_file("$a = 1; /* starts here\n   ends here */\nfunction foo() {}")
        end = locate_doc_comment(file, _func(file))
        assert file.tokens[end].type == TokenType.COMMENT


class TestReadDocComment:
    def test_tags_in_order(self, php_file):
        file = php_file("/**\n * @param int $a A.\n * @see foo()\n * @return int\n */\nfunction foo($a) {}")
        comment = read_doc_comment(file, locate_doc_comment(file, _func(file)))
        assert [t.name for t in comment.tags] == ["@param", "@see", "@return"]
        assert [t.line for t in comment.tags] == [3, 4, 5]
        assert file.tokens[comment.open_index].type == TokenType.DOC_COMMENT_OPEN_TAG
        assert [t.name for t in comment.tags_named("@see")] == ["@see"]

    def test_plain_comment_has_no_tags(self, php_file):
        file = php_file("// @return int\nfunction foo() {}")
        end = locate_doc_comment(file, _func(file))
        comment = read_doc_comment(file, end)
        assert comment.open_index == comment.close_index == end
        assert comment.tags == ()

    def test_broken_pairing_fails_fast(self, php_file):
        file = php_file("/** Doc. */\nfunction foo() {}")
        end = locate_doc_comment(file, _func(file))
        tokens = list(file.tokens)
        tokens[end] = dataclasses.replace(tokens[end], comment_opener=None)
        broken = SourceFile(file.source, tokens=tuple(tokens))
        with pytest.raises(TokenStreamError):
            read_doc_comment(broken, end)

    def test_not_a_comment(self, php_file):
        file = php_file("function foo() {}")
        with pytest.raises(TokenStreamError):
            read_doc_comment(file, _func(file))


class TestInheritDoc:
    def test_inheritdoc(self, php_file):
        file = php_file("/** {@inheritdoc} */\nfunction foo() {}")
        assert is_inherit_doc(file, _func(file)) is True

    def test_case_insensitive(self, php_file):
        file = php_file("/**\n * {@INHERITDOC}\n */\nfunction foo() {}")
        assert is_inherit_doc(file, _func(file)) is True

    def test_mixed_with_other_text(self, php_file):
        file = php_file("/**\n * Summary.\n *\n * {@inheritDoc}\n */\nfunction foo() {}")
        assert is_inherit_doc(file, _func(file)) is True

    def test_plain_doc_comment(self, php_file):
        file = php_file("/** Does foo. */\nfunction foo() {}")
        assert is_inherit_doc(file, _func(file)) is False

    def test_bare_tag_is_not_inline_marker(self, php_file):
        file = php_file("/** @inheritdoc */\nfunction foo() {}")
        assert is_inherit_doc(file, _func(file)) is False

    def test_no_doc_comment(self, php_file):
        file = php_file("function foo() {}")
        assert is_inherit_doc(file, _func(file)) is False

    def test_uses_nearest_preceding_doc_comment(self, php_file):
        file = php_file(
            "/** {@inheritdoc} */\nfunction foo() {}\n/** Bar. */\nfunction bar() {}"
        )
        assert is_inherit_doc(file, _func(file, 0)) is True
        assert is_inherit_doc(file, _func(file, 1)) is False
