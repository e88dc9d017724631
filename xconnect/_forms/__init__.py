from ._dto import Dto, WireMap, WireValue, normalize_wire_value
from ._file import MultipartFile, guess_content_type
from ._multipart import (
    EasyMultipart,
    FormData,
    FormField,
    FormFile,
    MultipartDto,
    generate_boundary,
    multipart_headers,
    parse_multipart,
)

__all__ = [
    "Dto",
    "EasyMultipart",
    "FormData",
    "FormField",
    "FormFile",
    "MultipartDto",
    "MultipartFile",
    "WireMap",
    "WireValue",
    "generate_boundary",
    "guess_content_type",
    "multipart_headers",
    "normalize_wire_value",
    "parse_multipart",
]
