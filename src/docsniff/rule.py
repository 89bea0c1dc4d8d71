"""The function comment rule."""

from __future__ import annotations

from docsniff.docblock import DocComment, is_inherit_doc, locate_doc_comment, read_doc_comment
from docsniff.files import SourceFile
from docsniff.returns import has_matching_return
from docsniff.tags import PearTagValidator, TagValidator, tag_content
from docsniff.tokens import TokenType

METRIC_HAS_DOC_COMMENT = "Function has doc comment"


class FunctionCommentRule:
    """Check the doc comment of every named function declaration.

    The rule reports missing comments and empty ``@see`` tags itself, and hands
    ``@return``, ``@throws`` and ``@param`` checks to a TagValidator. ``@return``
    is only checked when the body actually returns a value, and neither
    ``@return`` nor ``@param`` is checked for ``{@inheritdoc}`` comments.
    """

    name = "FunctionComment"
    targets = frozenset({TokenType.FUNCTION})

    def __init__(self, validator: TagValidator | None = None) -> None:
        self.validator: TagValidator = validator if validator is not None else PearTagValidator()

    def process(self, file: SourceFile, stack_ptr: int) -> None:
        comment_end = locate_doc_comment(file, stack_ptr)
        if comment_end is None:
            function = file.get_declaration_name(stack_ptr) or ""
            file.add_error(
                "Missing doc comment for function %s()",
                stack_ptr,
                "Missing",
                (function,),
                source=self.name,
            )
            file.record_metric(stack_ptr, METRIC_HAS_DOC_COMMENT, "no")
            return

        file.record_metric(stack_ptr, METRIC_HAS_DOC_COMMENT, "yes")

        comment = read_doc_comment(file, comment_end)
        self.process_sees(file, comment)

        self.process_return(file, stack_ptr, comment.open_index)
        self.process_throws(file, stack_ptr, comment.open_index)
        self.process_params(file, stack_ptr, comment.open_index)

    def process_sees(self, file: SourceFile, comment: DocComment) -> None:
        for tag in comment.tags_named("@see"):
            if tag_content(file, tag.index, comment.close_index) is None:
                file.add_error(
                    "Content missing for @see tag in function comment",
                    tag.index,
                    "EmptySees",
                    source=self.name,
                )

    def process_return(self, file: SourceFile, stack_ptr: int, comment_start: int) -> None:
        if is_inherit_doc(file, stack_ptr):
            return
        # Only a non-void return statement makes @return mandatory
        if has_matching_return(file, stack_ptr):
            self.validator.validate_return(file, stack_ptr, comment_start)

    def process_throws(self, file: SourceFile, stack_ptr: int, comment_start: int) -> None:
        self.validator.validate_throws(file, stack_ptr, comment_start)

    def process_params(self, file: SourceFile, stack_ptr: int, comment_start: int) -> None:
        if is_inherit_doc(file, stack_ptr):
            return
        self.validator.validate_params(file, stack_ptr, comment_start)


def check_file(file: SourceFile, rule: FunctionCommentRule | None = None) -> SourceFile:
    """Run *rule* on every target token of *file*, in file order."""
    if rule is None:
        rule = FunctionCommentRule()
    for i, tok in enumerate(file.tokens):
        if tok.type in rule.targets:
            rule.process(file, i)
    return file
