"""
Field predicates used by smart filters.

A predicate is either an exact value or a single-key operator object, e.g.
``"Batman"``, ``{"contains": "Bat"}``, ``{"any": ["a", "b"]}`` or, for
orderable values only, ``{"gte": 13}`` and
``{"from": "2021-01-01T00:00:00Z", "to": "2021-01-02T00:00:00Z"}``.

String predicates never admit the comparison/range operators; pydantic
rejects them at construction time.
"""
from datetime import datetime
from typing import Any, ClassVar, Generic, TypeVar

from pydantic import BaseModel, ConfigDict, Field

T = TypeVar("T")

Number = int | float


class Operator(BaseModel):
    """Base for single-key operator predicates."""

    model_config = ConfigDict(extra="forbid", frozen=True, populate_by_name=True)

    # Form-level operation name this operator maps to
    operation: ClassVar[str]
    # Python attribute holding the operand
    value_field: ClassVar[str]

    @property
    def value(self) -> Any:
        """The operand, in the shape the form representation stores it."""
        return getattr(self, self.value_field)


class NotOp(Operator, Generic[T]):
    """Matches values not equal to the operand."""

    operation: ClassVar[str] = "not"
    value_field: ClassVar[str] = "not_"

    not_: T = Field(alias="not")


class ContainsOp(Operator, Generic[T]):
    """Matches values containing the operand."""

    operation: ClassVar[str] = "contains"
    value_field: ClassVar[str] = "contains"

    contains: T


class ExcludesOp(Operator, Generic[T]):
    """Matches values not containing the operand."""

    operation: ClassVar[str] = "excludes"
    value_field: ClassVar[str] = "excludes"

    excludes: T


class AnyOp(Operator, Generic[T]):
    """Matches values equal to any operand in the list."""

    operation: ClassVar[str] = "any"
    value_field: ClassVar[str] = "any_"

    any_: list[T] = Field(alias="any")


class NoneOp(Operator, Generic[T]):
    """Matches values equal to none of the operands in the list."""

    operation: ClassVar[str] = "none"
    value_field: ClassVar[str] = "none"

    none: list[T]


class GtOp(Operator, Generic[T]):
    operation: ClassVar[str] = "gt"
    value_field: ClassVar[str] = "gt"

    gt: T


class GteOp(Operator, Generic[T]):
    operation: ClassVar[str] = "gte"
    value_field: ClassVar[str] = "gte"

    gte: T


class LtOp(Operator, Generic[T]):
    operation: ClassVar[str] = "lt"
    value_field: ClassVar[str] = "lt"

    lt: T


class LteOp(Operator, Generic[T]):
    operation: ClassVar[str] = "lte"
    value_field: ClassVar[str] = "lte"

    lte: T


class RangeOp(Operator, Generic[T]):
    """
    Matches values between ``from`` and ``to``.

    ``inclusive`` is omitted from the wire form when unset, leaving the
    boundary behavior to the server default.
    """

    operation: ClassVar[str] = "range"

    from_: T = Field(alias="from")
    to: T
    inclusive: bool | None = None

    @property
    def value(self) -> "RangeOp[T]":
        return self


StringPredicate = (
    str
    | NotOp[str]
    | ContainsOp[str]
    | ExcludesOp[str]
    | AnyOp[str]
    | NoneOp[str]
)

NumberPredicate = (
    Number
    | NotOp[Number]
    | ContainsOp[Number]
    | ExcludesOp[Number]
    | AnyOp[Number]
    | NoneOp[Number]
    | GtOp[Number]
    | GteOp[Number]
    | LtOp[Number]
    | LteOp[Number]
    | RangeOp[Number]
)

DateTimePredicate = (
    datetime
    | NotOp[datetime]
    | ContainsOp[datetime]
    | ExcludesOp[datetime]
    | AnyOp[datetime]
    | NoneOp[datetime]
    | GtOp[datetime]
    | GteOp[datetime]
    | LtOp[datetime]
    | LteOp[datetime]
    | RangeOp[datetime]
)

# Operations that need an orderable operand
ORDERED_OPERATIONS = frozenset({"gt", "gte", "lt", "lte", "range"})

# Form operation name -> wire key for single-key operators
OPERATION_KEYS: dict[str, str] = {
    "not": "not",
    "contains": "contains",
    "excludes": "excludes",
    "any": "any",
    "none": "none",
    "gt": "gt",
    "gte": "gte",
    "lt": "lt",
    "lte": "lte",
}


def describe_predicate(predicate: Any) -> tuple[str, Any]:
    """
    Split a predicate into its form-level ``(operation, value)`` pair.

    Exact values are reported as the ``equals`` operation.
    """
    if isinstance(predicate, Operator):
        return predicate.operation, predicate.value
    return "equals", predicate


def build_predicate(operation: str, value: Any) -> Any:
    """
    Build the wire shape of a predicate from a form-level operation.

    The result is plain data; the entity filter model that receives it
    selects (and validates) the concrete predicate type for its field.
    """
    if operation == "equals":
        return value
    if operation == "range":
        if isinstance(value, BaseModel):
            return value.model_dump(by_alias=True, exclude_none=True)
        return dict(value)
    try:
        key = OPERATION_KEYS[operation]
    except KeyError:
        raise ValueError(f"Unknown filter operation: {operation!r}") from None
    return {key: value}


# Public builders. Each returns the wire shape so it can be passed straight
# into an entity filter, e.g. MediaFilter(name=contains("Bat")).


def not_equal(value: Any) -> dict[str, Any]:
    return {"not": value}


def contains(value: Any) -> dict[str, Any]:
    return {"contains": value}


def excludes(value: Any) -> dict[str, Any]:
    return {"excludes": value}


def any_of(values: list[Any]) -> dict[str, Any]:
    return {"any": list(values)}


def none_of(values: list[Any]) -> dict[str, Any]:
    return {"none": list(values)}


def gt(value: Any) -> dict[str, Any]:
    return {"gt": value}


def gte(value: Any) -> dict[str, Any]:
    return {"gte": value}


def lt(value: Any) -> dict[str, Any]:
    return {"lt": value}


def lte(value: Any) -> dict[str, Any]:
    return {"lte": value}


def between(start: Any, end: Any, inclusive: bool | None = None) -> dict[str, Any]:
    """Build a range predicate; ``inclusive`` is left out when not given."""
    predicate: dict[str, Any] = {"from": start, "to": end}
    if inclusive is not None:
        predicate["inclusive"] = inclusive
    return predicate
