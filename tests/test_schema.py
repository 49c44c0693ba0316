"""Tests for props-schema validation and diagnostics."""

from typing import TypedDict

import pytest
from pydantic import BaseModel

from safemdx.diagnostics import Diagnostic, collapse_snippet
from safemdx.errors import EvaluationError, ExpressionSyntaxError, SafeMdxError, UnrecognizedNodeError
from safemdx.location import SourceLocation
from safemdx.schema import PropsValidator, PydanticPropsSchema, SchemaIssue, as_validator, issue_message, run_validator


class ButtonProps(BaseModel):
    label: str
    size: int = 1


class LinkProps(TypedDict):
    href: str


class TestPydanticSchema:
    def test_valid_props(self) -> None:
        assert PydanticPropsSchema(ButtonProps).validate({"label": "Go"}) == ()

    def test_issues_carry_paths(self) -> None:
        issues = PydanticPropsSchema(ButtonProps).validate({"size": "big"})
        assert {issue.dotted_path for issue in issues} == {"label", "size"}

    def test_typed_dict(self) -> None:
        (issue,) = PydanticPropsSchema(LinkProps).validate({"href": 3})
        assert issue == SchemaIssue(path=("href",), message="Input should be a valid string")

    def test_is_a_props_validator(self) -> None:
        assert isinstance(PydanticPropsSchema(ButtonProps), PropsValidator)


class TestValidatorShapes:
    def test_model_class_is_wrapped(self) -> None:
        validator = as_validator(ButtonProps)
        assert isinstance(validator, PydanticPropsSchema)
        assert len(run_validator(validator, {})) == 1

    def test_callable_passes_through(self) -> None:
        def check(props: object) -> list[SchemaIssue]:
            return [SchemaIssue(path=("a", 0), message="nope")]

        assert as_validator(check) is check
        (issue,) = run_validator(check, {})
        assert issue.dotted_path == "a.0"

    def test_issue_message(self) -> None:
        assert (
            issue_message("Button", SchemaIssue(path=("label",), message="Field required"))
            == 'Invalid props for component "Button" at "label": Field required'
        )
        assert issue_message("Button", SchemaIssue(path=(), message="bad")).endswith('at "unknown": bad')


class TestDiagnostics:
    def test_to_dict_omits_unset_fields(self) -> None:
        assert Diagnostic("m").to_dict() == {"message": "m"}
        assert Diagnostic("m", line=2, schema_path="a.b").to_dict() == {
            "message": "m",
            "line": 2,
            "schemaPath": "a.b",
        }

    def test_collapse_snippet(self) -> None:
        assert collapse_snippet("...{\n\n  spread:   true\n}") == "...{ spread: true }"


class TestErrors:
    def test_hierarchy(self) -> None:
        for error in (ExpressionSyntaxError("x"), EvaluationError("x"), UnrecognizedNodeError("weird")):
            assert isinstance(error, SafeMdxError)

    def test_unsupported_message(self) -> None:
        error = EvaluationError.unsupported("CallExpression")
        assert str(error) == "CallExpression is not supported"

    def test_unrecognized_node_location(self) -> None:
        error = UnrecognizedNodeError("weird", SourceLocation(lineno=4, col_offset=2))
        assert error.kind == "weird"
        assert str(error) == "cannot convert node of type 'weird' at 4:2"
        assert str(UnrecognizedNodeError("weird")) == "cannot convert node of type 'weird'"

    def test_syntax_error_offset(self) -> None:
        with pytest.raises(ExpressionSyntaxError) as info:
            raise ExpressionSyntaxError("Unexpected token", 7)
        assert info.value.offset == 7
