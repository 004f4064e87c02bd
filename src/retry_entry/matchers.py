"""Error matchers used to classify task failures.

A matcher answers one question: does this error belong to a named class?
Matchers are pure and never raise, including for ``None``.
"""

from __future__ import annotations

from collections.abc import Callable, Iterator
from dataclasses import dataclass
from typing import Protocol

from retry_entry.errors import DUPLICATE_ENTRY_ERROR_NUMBER, MySQLError

# PEP 249 base class every driver's IntegrityError derives from.
_DBAPI_ERROR_BASE = "DatabaseError"


class ErrorMatcher(Protocol):
    """Predicate over an error value."""

    def match(self, error: BaseException | None) -> bool:
        """Return whether ``error`` belongs to this matcher's class."""


@dataclass(frozen=True)
class ErrorMatcherFunc:
    """Adapt a plain predicate into an ``ErrorMatcher``."""

    func: Callable[[BaseException | None], bool]

    def match(self, error: BaseException | None) -> bool:
        return self.func(error)


def _iter_error_chain(error: BaseException | None) -> Iterator[BaseException]:
    seen: set[int] = set()
    current = error
    while current is not None and id(current) not in seen:
        seen.add(id(current))
        yield current
        current = current.__cause__ or current.__context__


def _is_dbapi_error(error: BaseException) -> bool:
    if isinstance(error, OSError):
        return False
    return any(cls.__name__ == _DBAPI_ERROR_BASE for cls in type(error).__mro__)


def _mysql_error_fields(error: BaseException) -> tuple[int, str] | None:
    if isinstance(error, MySQLError):
        return error.number, error.message
    # DB-API drivers raise e.g. IntegrityError(1062, "Duplicate entry ...").
    if not _is_dbapi_error(error):
        return None
    args = error.args
    if (
        len(args) >= 2
        and isinstance(args[0], int)
        and not isinstance(args[0], bool)
        and isinstance(args[1], str)
    ):
        return args[0], args[1]
    return None


def is_duplicate_entry_error(
    error: BaseException | None,
    duplicate_entry_name: str,
) -> bool:
    """Return whether ``error`` is a MySQL duplicate-key error for an entry.

    The first error in the exception chain with a MySQL shape decides: its
    number must be 1062 and its message must contain ``duplicate_entry_name``.
    """
    for candidate in _iter_error_chain(error):
        fields = _mysql_error_fields(candidate)
        if fields is None:
            continue
        number, message = fields
        return number == DUPLICATE_ENTRY_ERROR_NUMBER and (
            duplicate_entry_name in message
        )
    return False


def duplicate_entry_error(duplicate_entry_name: str) -> ErrorMatcherFunc:
    """Match MySQL duplicate-key errors mentioning ``duplicate_entry_name``."""
    return ErrorMatcherFunc(
        lambda error: is_duplicate_entry_error(error, duplicate_entry_name)
    )


def error_is(target: BaseException | None) -> ErrorMatcherFunc:
    """Match exactly the ``target`` error instance."""
    return ErrorMatcherFunc(lambda error: error is not None and error is target)


def error_caused_by(target: BaseException) -> ErrorMatcherFunc:
    """Match ``target`` itself or any error whose chain contains it."""
    return ErrorMatcherFunc(
        lambda error: any(link is target for link in _iter_error_chain(error))
    )


def error_type(*types: type[BaseException]) -> ErrorMatcherFunc:
    """Match instances of any of ``types``."""
    if not types:
        raise ValueError("error_type requires at least one exception type")
    return ErrorMatcherFunc(lambda error: isinstance(error, types))
