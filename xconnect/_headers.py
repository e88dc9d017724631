from typing import Iterable, Mapping, Union

from httpx import Headers

HeaderTypes = Union[Headers, Mapping[str, str], Iterable[tuple[str, str]], None]


def _encode_value(value: Union[str, bytes]) -> bytes:
    # httpx only accepts ASCII str values; wider text goes out as UTF-8
    if isinstance(value, bytes):
        return value
    return value.encode("utf-8")


def to_headers(headers: HeaderTypes) -> Headers:
    """Build ``httpx.Headers`` from a mapping, pairs or another ``Headers``.

    Non-ASCII values are sent UTF-8 encoded and decode back unchanged
    through ``header_pairs``. Header names must still be ASCII.
    """
    if headers is None:
        return Headers()
    if isinstance(headers, Headers):
        return headers.copy()
    items = headers.items() if isinstance(headers, Mapping) else headers
    return Headers([(key, _encode_value(value)) for key, value in items])


def header_pairs(headers: Headers) -> tuple[tuple[str, str], ...]:
    """Header items with their original casing preserved."""
    return tuple(
        (key.decode(headers.encoding), value.decode(headers.encoding))
        for key, value in headers.raw
    )
