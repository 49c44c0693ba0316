"""Props-schema validation for component invocations.

Validators are registered per component name. A validator reports issues as
``(path, message)`` pairs; the walker turns each issue into one diagnostic
and still renders the component with its props untouched.

Two validator shapes are accepted:

- objects implementing :class:`PropsValidator` (``validate(props)``), such
  as :class:`PydanticPropsSchema`
- plain callables ``props -> Sequence[SchemaIssue]``

Example:
    >>> from pydantic import BaseModel
    >>> class ButtonProps(BaseModel):
    ...     label: str
    >>> PydanticPropsSchema(ButtonProps).validate({"label": 3})
    (SchemaIssue(path=('label',), message='Input should be a valid string'),)

"""

from __future__ import annotations

from collections.abc import Callable, Mapping, Sequence
from dataclasses import dataclass
from typing import Any, Protocol, runtime_checkable

from pydantic import BaseModel, TypeAdapter, ValidationError


@dataclass(frozen=True, slots=True)
class SchemaIssue:
    """One violated field: ``path`` into the props, human readable message."""

    path: tuple[str | int, ...]
    message: str

    @property
    def dotted_path(self) -> str:
        return ".".join(str(part) for part in self.path)


@runtime_checkable
class PropsValidator(Protocol):
    """Validates an assembled props mapping."""

    def validate(self, props: Mapping[str, Any]) -> Sequence[SchemaIssue]: ...


type PropsSchema = PropsValidator | Callable[[Mapping[str, Any]], Sequence[SchemaIssue]]


class PydanticPropsSchema:
    """Adapter exposing a pydantic model (or any type) as a props validator.

    Args:
        model: A ``BaseModel`` subclass, or any type ``TypeAdapter`` accepts
            (``TypedDict``, ``dict[str, int]``...)

    """

    __slots__ = ("_adapter",)

    def __init__(self, model: type[BaseModel] | Any) -> None:
        self._adapter: TypeAdapter[Any] = TypeAdapter(model)

    def validate(self, props: Mapping[str, Any]) -> tuple[SchemaIssue, ...]:
        try:
            self._adapter.validate_python(dict(props))
        except ValidationError as exc:
            return tuple(
                SchemaIssue(path=tuple(error["loc"]), message=error["msg"]) for error in exc.errors()
            )
        return ()


def as_validator(schema: PropsSchema | type[BaseModel]) -> PropsSchema:
    """Wrap bare pydantic model classes; other validators pass through."""
    if isinstance(schema, type) and issubclass(schema, BaseModel):
        return PydanticPropsSchema(schema)
    return schema


def run_validator(validator: PropsSchema, props: Mapping[str, Any]) -> Sequence[SchemaIssue]:
    """Run either validator shape and return its issues."""
    if isinstance(validator, PropsValidator):
        return validator.validate(props)
    return validator(props)


def issue_message(component: str, issue: SchemaIssue) -> str:
    """Diagnostic text for a schema issue (``unknown`` for an empty path)."""
    return f'Invalid props for component "{component}" at "{issue.dotted_path or "unknown"}": {issue.message}'
