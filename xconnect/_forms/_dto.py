import base64
import json
import logging
from datetime import date, datetime, time
from decimal import Decimal
from enum import Enum
from pathlib import PurePath
from types import MappingProxyType
from typing import Any, ClassVar, Iterator, Mapping, Optional, Union
from uuid import UUID

from httpx import URL
from pydantic import BaseModel, ConfigDict
from pydantic.fields import FieldInfo

from ._file import MultipartFile

logger = logging.getLogger("xconnect")

WireValue = Union[
    str,
    int,
    float,
    bool,
    None,
    bytes,
    list["WireValue"],
    dict[str, "WireValue"],
    MultipartFile,
    PurePath,
]
WireMap = Mapping[str, WireValue]


def normalize_wire_value(value: Any) -> WireValue:
    """Reduce an arbitrary field value to a member of ``WireValue``."""
    if isinstance(value, Enum):
        return normalize_wire_value(value.value)
    if value is None or isinstance(value, (str, bool, int, float)):
        return value
    if isinstance(value, Dto):
        nested = value.to_wire_map()
        return dict(nested) if nested else {}
    if isinstance(value, BaseModel):
        return value.model_dump(mode="json", by_alias=True, exclude_none=True)
    if isinstance(value, URL):
        return str(value)
    if isinstance(value, (MultipartFile, PurePath)):
        return value
    if isinstance(value, (bytes, bytearray, memoryview)):
        return bytes(value)
    if isinstance(value, Mapping):
        return {str(key): normalize_wire_value(item) for key, item in value.items()}
    if isinstance(value, (list, tuple, set, frozenset)):
        return [normalize_wire_value(item) for item in value]
    if isinstance(value, (datetime, date, time)):
        return value.isoformat()
    if isinstance(value, (UUID, Decimal)):
        return str(value)
    return str(value)


def _json_default(value: Any) -> Any:
    if isinstance(value, bytes):
        return base64.b64encode(value).decode("ascii")
    if isinstance(value, MultipartFile):
        return value.filename
    if isinstance(value, PurePath):
        return str(value)
    raise TypeError(f"Object of type {type(value).__name__} is not JSON serializable")


def dumps_wire(value: Any) -> str:
    """Compact JSON text for a wire value or wire map.

    Raises ``ValueError`` for NaN and infinite floats, which JSON cannot carry.
    """
    return json.dumps(
        value,
        default=_json_default,
        separators=(",", ":"),
        ensure_ascii=False,
        allow_nan=False,
    )


def query_value(value: WireValue) -> str:
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, (int, float)):
        return str(value)
    if isinstance(value, str):
        return value
    if isinstance(value, (dict, list)):
        return dumps_wire(value)
    if isinstance(value, bytes):
        return base64.b64encode(value).decode("ascii")
    if isinstance(value, MultipartFile):
        return value.filename
    return str(value)


class Dto(BaseModel):
    """Base class for records sent as request bodies or query strings.

    The declared pydantic fields, in declaration order, are the record's
    field list. A field's wire key is looked up in ``wire_keys`` first, then
    in the field's serialization alias or alias, and falls back to the field
    name. Optional fields that were never set are left out. Fields set to
    ``None`` explicitly are left out too unless ``emit_null`` is true.

    Subclasses that need full control over what goes on the wire override
    ``wire_map``.

    Examples:
        ```python
        class CreateUser(Dto):
            wire_keys = {"secret_password": "password"}

            name: str
            email: str
            secret_password: str
            nickname: Optional[str] = None

        CreateUser(name="x", email="x@y.z", secret_password="s").to_data()
        # b'{"name":"x","email":"x@y.z","password":"s"}'
        ```
    """

    model_config = ConfigDict(
        validate_by_name=True,
        validate_by_alias=True,
        arbitrary_types_allowed=True,
    )

    wire_keys: ClassVar[dict[str, str]] = {}
    emit_null: ClassVar[bool] = False

    @classmethod
    def __pydantic_init_subclass__(cls, **kwargs: Any) -> None:
        super().__pydantic_init_subclass__(**kwargs)

        seen: dict[str, str] = {}
        for name, info in cls.model_fields.items():
            key = cls.wire_key(name, info)
            if key in seen:
                raise TypeError(
                    f"{cls.__name__}: fields `{seen[key]}` and `{name}` "
                    f"both map to wire key `{key}`."
                )
            seen[key] = name

    @classmethod
    def wire_key(cls, name: str, info: Optional[FieldInfo] = None) -> str:
        if name in cls.wire_keys:
            return cls.wire_keys[name]
        info = info or cls.model_fields[name]
        return info.serialization_alias or info.alias or name

    def wire_map(self) -> Optional[Mapping[str, Any]]:
        """Return an explicit key/value mapping to send instead of the fields."""
        return None

    def _declared_items(self) -> Iterator[tuple[str, Any]]:
        fields_set = self.model_fields_set
        for name, info in type(self).model_fields.items():
            value = getattr(self, name)
            if value is None:
                if name not in fields_set or not self.emit_null:
                    continue
            yield self.wire_key(name, info), value

    def to_wire_map(self) -> Optional[WireMap]:
        """Encode the record, or return ``None`` when there is nothing to send.

        Encoding failures are logged and reported as ``None``.
        """
        try:
            explicit = self.wire_map()
            if explicit is None:
                items = self._declared_items()
            else:
                items = (
                    (key, value)
                    for key, value in explicit.items()
                    if value is not None or self.emit_null
                )
            wire = {key: normalize_wire_value(value) for key, value in items}
        except Exception:
            logger.warning(
                "Encoding %s failed, sending no data", type(self).__name__, exc_info=True
            )
            return None

        return MappingProxyType(wire) if wire else None

    def to_data(self) -> Optional[bytes]:
        """Compact JSON body, or ``None`` when the record has no emittable fields."""
        wire = self.to_wire_map()
        if wire is None:
            return None

        try:
            return dumps_wire(dict(wire)).encode("utf-8")
        except (TypeError, ValueError):
            logger.warning(
                "Encoding %s failed, sending no data", type(self).__name__, exc_info=True
            )
            return None

    def to_query_params(self) -> Optional[dict[str, str]]:
        """Flatten the record into string query parameters."""
        wire = self.to_wire_map()
        if not wire:
            return None

        try:
            params = {
                key: query_value(value)
                for key, value in wire.items()
                if value is not None
            }
        except (TypeError, ValueError):
            logger.warning(
                "Encoding %s as query failed, sending no parameters",
                type(self).__name__,
                exc_info=True,
            )
            return None
        return params or None

    def to_string(self) -> str:
        data = self.to_data()
        if data is not None:
            return data.decode("utf-8")
        return repr(self)
