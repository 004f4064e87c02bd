"""Run a task repeatedly, classifying each failure with error matchers.

Typical use::

    result = (
        RetryEntry(insert_row, 3)
        .with_acceptable_errors(duplicate_entry_error("orders.uniq_order_id"))
        .with_retry_errors(error_type(ConnectionError))
        .run()
    )
    if not result.success:
        raise result.last_error
"""

from retry_entry.entry import RetryEntry, RetryOutcome, RetryResult
from retry_entry.errors import DUPLICATE_ENTRY_ERROR_NUMBER, MySQLError
from retry_entry.matchers import (
    ErrorMatcher,
    ErrorMatcherFunc,
    duplicate_entry_error,
    error_caused_by,
    error_is,
    error_type,
    is_duplicate_entry_error,
)
from retry_entry.settings import RetrySettings
from retry_entry.task import Task, TaskFunc, as_task

__all__ = [
    "DUPLICATE_ENTRY_ERROR_NUMBER",
    "ErrorMatcher",
    "ErrorMatcherFunc",
    "MySQLError",
    "RetryEntry",
    "RetryOutcome",
    "RetryResult",
    "RetrySettings",
    "Task",
    "TaskFunc",
    "as_task",
    "duplicate_entry_error",
    "error_caused_by",
    "error_is",
    "error_type",
    "is_duplicate_entry_error",
]
