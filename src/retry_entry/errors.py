"""Error shapes recognised by the built-in matchers."""

DUPLICATE_ENTRY_ERROR_NUMBER = 1062


class MySQLError(Exception):
    """MySQL server error carrying the numeric error code and message.

    Attributes:
        number: MySQL error number, for example ``1062`` for a duplicate key.
        message: Server-provided error message.
    """

    def __init__(self, number: int, message: str) -> None:
        self.number = number
        self.message = message
        super().__init__(f"Error {number}: {message}")
