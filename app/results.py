"""
Service result values.

Every public service method returns exactly one of these variants; the
router layer matches on them to pick a status code.  Services never raise
for expected outcomes (missing rows, bad payloads) and never know about
HTTP.

    Present(value)   the operation produced a value (possibly ``None`` for deletes)
    Absent()         the requested record or collection does not exist
    Invalid(errors)  the payload was rejected; *errors* is a list of
                     ``{"loc": [...], "msg": str, "type": str}`` entries
    Failure(error)   the persistence layer failed; *error* is the original exception
"""
from dataclasses import dataclass, field
from typing import Any, Generic, TypeVar, Union

T = TypeVar("T")


@dataclass(frozen=True)
class Present(Generic[T]):
    value: T


@dataclass(frozen=True)
class Absent:
    pass


@dataclass(frozen=True)
class Invalid:
    errors: list[dict[str, Any]] = field(default_factory=list)

    @classmethod
    def single(cls, loc: str, msg: str, type_: str = "value_error") -> "Invalid":
        return cls([{"loc": [loc], "msg": msg, "type": type_}])


@dataclass(frozen=True)
class Failure:
    error: Exception


Lookup = Union[Present[T], Absent, Failure]
Write = Union[Present[T], Absent, Invalid, Failure]
