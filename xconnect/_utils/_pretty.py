import logging
from typing import Optional

from ..models.exceptions import (
    DataCorruptedError,
    DecodingError,
    KeyNotFoundError,
    TypeMismatchError,
    ValueNotFoundError,
)

_RULE = "------------------------"


def format_decoding_error(error: DecodingError) -> str:
    """Render a decoding error as a multi-line diagnostic."""
    if isinstance(error, KeyNotFoundError):
        return "\n".join(
            [
                f"❌ {error.title}",
                _RULE,
                f"Missing Key: {error.key}",
                f"Location: {error.path_description}",
                f"Details: {error.debug_description}",
                "",
                f'💡 Solution: Please ensure the JSON contains the required key "{error.key}"',
            ]
        )

    if isinstance(error, ValueNotFoundError):
        solution = "Please check if the value is null or missing"
    elif isinstance(error, TypeMismatchError):
        solution = "Please ensure the value matches the expected type"
    elif isinstance(error, DataCorruptedError):
        solution = "Please verify the data format is valid"
    else:
        solution = "Please check the data structure and format"

    lines = [f"❌ {error.title}", _RULE]
    if error.expected_type is not None and not isinstance(error, DataCorruptedError):
        lines.append(f"Expected Type: {error.expected_type}")
    lines.append(f"Location: {error.path_description}")
    lines.append(f"Details: {error.debug_description}")
    lines.append("")
    lines.append(f"💡 Solution: {solution}")
    return "\n".join(lines)


def pretty_error(error: BaseException) -> str:
    if isinstance(error, DecodingError):
        return format_decoding_error(error)
    return "\n".join(["❌ Error", _RULE, str(error) or type(error).__name__])


class ErrorReporter:
    """Writes human readable diagnostics for errors to a logger.

    The logger is injected, so each client can route its diagnostics
    independently.
    """

    def __init__(
        self, logger: Optional[logging.Logger] = None, level: int = logging.ERROR
    ) -> None:
        self._logger = logger or logging.getLogger("xconnect")
        self._level = level

    def report(self, error: BaseException) -> str:
        message = pretty_error(error)
        self._logger.log(self._level, message)
        return message
