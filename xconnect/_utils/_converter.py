from functools import lru_cache
from typing import Any, Mapping, Optional, Union

from httpx import Headers
from pydantic import TypeAdapter, ValidationError

from ..models.exceptions import (
    DataCorruptedError,
    DecodingError,
    KeyNotFoundError,
    TypeMismatchError,
    UnknownDecodingError,
    ValueNotFoundError,
)
from ..models.response import ResponseSource, TypedResponse, header_items_of

_DATA_CORRUPTED_TYPES = {"json_invalid", "json_type", "enum", "literal_error"}
_TYPE_NAMES = {
    "bool": "bool",
    "bytes": "bytes",
    "date": "date",
    "datetime": "datetime",
    "decimal": "Decimal",
    "dict": "dict",
    "float": "float",
    "int": "int",
    "list": "list",
    "model": "object",
    "model_attributes": "object",
    "set": "set",
    "string": "str",
    "tuple": "tuple",
    "uuid": "UUID",
}


@lru_cache(maxsize=256)
def _cached_adapter(response_type: Any) -> TypeAdapter:
    return TypeAdapter(response_type)


def _adapter(response_type: Any) -> TypeAdapter:
    try:
        return _cached_adapter(response_type)
    except TypeError:
        # unhashable type hint
        return TypeAdapter(response_type)


def _type_name(response_type: Any) -> str:
    return getattr(response_type, "__name__", None) or repr(response_type)


def _expected_type(error_type: str) -> Optional[str]:
    for suffix in ("_type", "_parsing"):
        if error_type.endswith(suffix):
            return _TYPE_NAMES.get(error_type[: -len(suffix)], error_type[: -len(suffix)])
    return None


def decoding_error_from_validation(
    error: ValidationError, response_type: Any, status_code: Optional[int] = None
) -> DecodingError:
    """Translate the first pydantic validation error into a ``DecodingError``."""
    details = error.errors(include_url=False)
    if not details:
        return UnknownDecodingError(
            str(error), expected_type=_type_name(response_type), status_code=status_code
        )

    first = details[0]
    error_type = first.get("type", "")
    coding_path = tuple(first.get("loc", ()))
    message = first.get("msg", str(error))
    expected = _expected_type(error_type)

    if error_type == "missing":
        return KeyNotFoundError(
            message, coding_path=coding_path, status_code=status_code
        )
    if error_type in _DATA_CORRUPTED_TYPES:
        return DataCorruptedError(
            message,
            coding_path=coding_path,
            expected_type=expected or _type_name(response_type),
            status_code=status_code,
        )
    if expected is not None:
        if first.get("input", ...) is None:
            return ValueNotFoundError(
                message,
                coding_path=coding_path,
                expected_type=expected,
                status_code=status_code,
            )
        return TypeMismatchError(
            message,
            coding_path=coding_path,
            expected_type=expected,
            status_code=status_code,
        )
    return UnknownDecodingError(
        message,
        coding_path=coding_path,
        expected_type=_type_name(response_type),
        status_code=status_code,
    )


def decode_payload(data: bytes, response_type: Any, status_code: Optional[int] = None) -> Any:
    """Decode ``data`` as ``response_type``.

    ``bytes`` returns the data verbatim and ``str`` its UTF-8 text (``None``
    when the data is not valid UTF-8). Every other type is validated from
    JSON with pydantic.

    Raises:
        DecodingError: If the data does not match the shape of ``response_type``.
    """
    if response_type is bytes:
        return data

    if response_type is str:
        try:
            return data.decode("utf-8")
        except UnicodeDecodeError:
            return None

    try:
        return _adapter(response_type).validate_json(data)
    except ValidationError as e:
        raise decoding_error_from_validation(e, response_type, status_code) from e


def decode_response(
    data: bytes,
    status_code: int,
    response_type: Any = bytes,
    *,
    headers: Union[Headers, Mapping[str, str], None] = None,
    source: ResponseSource = ResponseSource.NETWORK,
    url: Optional[str] = None,
) -> TypedResponse[Any]:
    payload = decode_payload(data, response_type, status_code)

    return TypedResponse(
        status_code=status_code,
        payload=payload,
        header_items=header_items_of(headers),
        source=source,
        url=url,
        content=data,
    )
