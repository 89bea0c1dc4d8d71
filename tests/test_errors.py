"""Test error and diagnostic formatting with source context."""

import pytest

from docsniff import check
from docsniff.errors import LexError, TokenStreamError
from docsniff.lexer import tokenize


class TestLexErrorPositions:
    def test_unterminated_comment_position(self):
        with pytest.raises(LexError) as exc_info:
            tokenize("<?php $a; /* open")
        err = exc_info.value
        assert err.line == 1
        assert err.column == 11

    def test_error_on_second_line(self):
        with pytest.raises(LexError) as exc_info:
            tokenize("<?php\n'abc")
        err = exc_info.value
        assert err.line == 2
        assert err.column == 1


class TestLexErrorFormatting:
    def test_format_contains_line(self):
        with pytest.raises(LexError) as exc_info:
            tokenize("<?php $a = 'oops")
        formatted = exc_info.value.format()
        assert "<?php $a = 'oops" in formatted

    def test_format_contains_carets(self):
        with pytest.raises(LexError) as exc_info:
            tokenize("<?php }")
        assert "^" in exc_info.value.format()

    def test_format_contains_error_prefix(self):
        with pytest.raises(LexError) as exc_info:
            tokenize("<?php }")
        assert exc_info.value.format().startswith("error:")

    def test_format_with_custom_filename(self):
        with pytest.raises(LexError) as exc_info:
            tokenize("<?php }", filename="src/a.php")
        formatted = exc_info.value.format("src/a.php")
        assert "src/a.php:1:7" in formatted


class TestDiagnosticFormatting:
    def test_missing_comment(self):
        source = "<?php\n\nfunction foo() {}\n"
        file = check(source, "a.php")
        formatted = file.diagnostics[0].format(source, "a.php")
        lines = formatted.splitlines()
        assert lines[0] == "error: Missing doc comment for function foo() [FunctionComment.Missing]"
        assert "a.php:3:1" in lines[1]
        assert "function foo() {}" in formatted
        assert lines[-1].endswith("^")


class TestTokenStreamError:
    def test_message_includes_index(self):
        err = TokenStreamError("broken pairing", 7)
        assert err.index == 7
        assert str(err) == "broken pairing (token 7)"
