"""Tag validators for @return, @throws and @param.

The function comment rule only decides *whether* a tag needs checking. The checks
themselves live behind the TagValidator protocol so they can be swapped out.
"""

from __future__ import annotations

import re
from typing import Protocol

from docsniff.files import SourceFile
from docsniff.tokens import TokenType

_SPECIAL_METHODS = frozenset({"__construct", "__destruct"})

# Long-form doc types accepted for the native hint on the right
_TYPE_ALIASES = {
    "integer": "int",
    "boolean": "bool",
    "double": "float",
    "callback": "callable",
    "list": "array",
}
_TYPE_SEPARATORS = re.compile(r"[|&()]")


class TagValidator(Protocol):
    def validate_return(self, file: SourceFile, stack_ptr: int, comment_start: int) -> None: ...

    def validate_throws(self, file: SourceFile, stack_ptr: int, comment_start: int) -> None: ...

    def validate_params(self, file: SourceFile, stack_ptr: int, comment_start: int) -> None: ...


def comment_end_of(file: SourceFile, comment_start: int) -> int:
    """Return the closing index of the comment opened at *comment_start*."""
    closer = file.tokens[comment_start].comment_closer
    return comment_start if closer is None else closer


def tag_pointers(file: SourceFile, comment_start: int, name: str) -> list[int]:
    tokens = file.tokens
    return [i for i in tokens[comment_start].comment_tags if tokens[i].content == name]


def tag_content(file: SourceFile, tag_ptr: int, comment_end: int) -> str | None:
    """Return the text following a tag on the same line, or None if there is none."""
    string = file.find_next(TokenType.DOC_COMMENT_STRING, tag_ptr, comment_end)
    if string is None or file.tokens[string].line != file.tokens[tag_ptr].line:
        return None
    return file.tokens[string].content


class PearTagValidator:
    """Tag checks in the style of the PEAR function comment standard."""

    def validate_return(self, file: SourceFile, stack_ptr: int, comment_start: int) -> None:
        name = file.get_declaration_name(stack_ptr) or ""
        if name.lower() in _SPECIAL_METHODS:
            return

        comment_end = comment_end_of(file, comment_start)
        returns = tag_pointers(file, comment_start, "@return")
        if not returns:
            file.add_error("Missing @return tag in function comment", comment_end, "MissingReturn")
            return

        for extra in returns[1:]:
            file.add_error("Only 1 @return tag is allowed in a function comment", extra, "DuplicateReturn")

        if tag_content(file, returns[0], comment_end) is None:
            file.add_error(
                "Return type missing for @return tag in function comment",
                returns[0],
                "MissingReturnType",
            )

    def validate_throws(self, file: SourceFile, stack_ptr: int, comment_start: int) -> None:
        comment_end = comment_end_of(file, comment_start)
        for tag in tag_pointers(file, comment_start, "@throws"):
            if tag_content(file, tag, comment_end) is None:
                file.add_error(
                    "Exception type missing for @throws tag in function comment",
                    tag,
                    "InvalidThrows",
                )

    def validate_params(self, file: SourceFile, stack_ptr: int, comment_start: int) -> None:
        comment_end = comment_end_of(file, comment_start)
        params = file.get_method_parameters(stack_ptr)
        documented: set[str] = set()

        for pos, tag in enumerate(tag_pointers(file, comment_start, "@param")):
            content = tag_content(file, tag, comment_end)
            if content is None:
                file.add_error("Missing parameter type", tag, "MissingParamType")
                continue

            parts = content.split(None, 2)
            if _is_variable(parts[0]):
                file.add_error("Missing parameter type", tag, "MissingParamType")
                parts.insert(0, "")
            if len(parts) < 2 or not _is_variable(parts[1]):
                file.add_error("Missing parameter name", tag, "MissingParamName")
                continue

            var_name = parts[1].lstrip("&").removeprefix("...")
            documented.add(var_name)
            if pos < len(params):
                real_name = params[pos].name
                hint = params[pos].type_hint
                if var_name != real_name:
                    file.add_error(
                        'Doc comment for parameter "%s" does not match actual variable name "%s"',
                        tag,
                        "ParamNameNoMatch",
                        (var_name, real_name),
                    )
                elif parts[0] and hint and not _documents_hint(parts[0], hint):
                    file.add_warning(
                        'Type hint "%s" of parameter "%s" is not covered by documented type "%s"',
                        tag,
                        "TypeHintMismatch",
                        (hint, real_name, parts[0]),
                    )
            else:
                file.add_error("Superfluous parameter comment", tag, "ExtraParamComment")

            if len(parts) < 3:
                file.add_error("Missing parameter comment", tag, "MissingParamComment")

        for param in params:
            if param.name not in documented:
                file.add_error(
                    'Doc comment for parameter "%s" missing',
                    comment_end,
                    "MissingParamTag",
                    (param.name,),
                )


def _is_variable(word: str) -> bool:
    return word.lstrip("&").removeprefix("...").startswith("$")


def _type_names(declared: str) -> set[str]:
    """Split a type expression into lowercase short names, e.g. ``?\\Foo\\Bar|int[]``."""
    names = set()
    for part in _TYPE_SEPARATORS.split(declared):
        part = part.strip().lstrip("?").lower()
        if not part:
            continue
        if part.endswith("[]"):
            part = "array"
        part = part.split("<", 1)[0].rsplit("\\", 1)[-1]
        names.add(_TYPE_ALIASES.get(part, part))
    return names


def _documents_hint(doc_type: str, hint: str) -> bool:
    """True when every non-null part of *hint* appears in the documented type."""
    documented = _type_names(doc_type)
    if "mixed" in documented:
        return True
    return _type_names(hint) - {"null"} <= documented
