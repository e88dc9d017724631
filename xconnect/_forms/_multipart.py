import logging
import re
import secrets
import string
from dataclasses import dataclass
from pathlib import PurePath
from typing import Any, Mapping, Optional, Union

from pydantic import PrivateAttr

from .._utils.constants import (
    APPLICATION_JSON,
    APPLICATION_OCTET_STREAM,
    BOUNDARY_LENGTH,
    BOUNDARY_PREFIX,
    HEADER_ACCEPT,
    HEADER_CONTENT_TYPE,
    MULTIPART_FORM_DATA,
)
from ._dto import Dto, WireMap, query_value
from ._file import MimeResolver, MultipartFile, guess_content_type

logger = logging.getLogger("xconnect")

_BOUNDARY_CHARACTERS = string.ascii_letters + string.digits
_DISPOSITION_NAME = re.compile(rb'(?:^|;)\s*name="([^"]*)"')
_DISPOSITION_FILENAME = re.compile(rb'(?:^|;)\s*filename="([^"]*)"')


def generate_boundary() -> str:
    random_part = "".join(
        secrets.choice(_BOUNDARY_CHARACTERS) for _ in range(BOUNDARY_LENGTH)
    )
    return f"{BOUNDARY_PREFIX}{random_part}"


def multipart_headers(boundary: str) -> dict[str, str]:
    """Headers a multipart body must be sent with."""
    return {
        HEADER_CONTENT_TYPE: f"{MULTIPART_FORM_DATA}; boundary={boundary}",
        HEADER_ACCEPT: APPLICATION_JSON,
    }


@dataclass(frozen=True)
class FormField:
    name: str
    value: str


@dataclass(frozen=True)
class FormFile:
    name: str
    file: MultipartFile


FormPart = Union[FormField, FormFile]


def _is_file_reference(value: Any) -> bool:
    return isinstance(value, (MultipartFile, PurePath))


class FormData:
    """Serializes a wire map into a ``multipart/form-data`` body.

    Parts are emitted in the wire map's insertion order. A file reference
    becomes a file part and a list becomes one part per element under the
    same name. Everything else becomes a single text field. ``Path`` values
    are read from disk when the form is built; unreadable files are logged
    and left out.
    """

    def __init__(
        self,
        wire_map: WireMap,
        boundary: str,
        resolver: MimeResolver = guess_content_type,
    ) -> None:
        self.boundary = boundary
        self._resolver = resolver
        self.parts: list[FormPart] = []

        for key, value in wire_map.items():
            if value is None:
                continue
            if isinstance(value, (list, tuple)):
                for item in value:
                    self._append(key, item)
            else:
                self._append(key, value)

    def _append(self, name: str, value: Any) -> None:
        if value is None:
            return
        if _is_file_reference(value):
            file = self._load_file(value)
            if file is not None:
                self.parts.append(FormFile(name, file))
            return
        self.parts.append(FormField(name, query_value(value)))

    def _load_file(self, value: Union[MultipartFile, PurePath]) -> Optional[MultipartFile]:
        if isinstance(value, MultipartFile):
            return value
        try:
            return MultipartFile.from_path(value, resolver=self._resolver)
        except OSError:
            logger.warning("Skipping unreadable file %s", value, exc_info=True)
            return None

    @property
    def fields(self) -> list[FormField]:
        return [part for part in self.parts if isinstance(part, FormField)]

    @property
    def files(self) -> list[FormFile]:
        return [part for part in self.parts if isinstance(part, FormFile)]

    @property
    def headers(self) -> dict[str, str]:
        return multipart_headers(self.boundary)

    def to_bytes(self) -> bytes:
        boundary_line = f"--{self.boundary}\r\n".encode("utf-8")
        chunks: list[bytes] = []

        for part in self.parts:
            chunks.append(boundary_line)
            if isinstance(part, FormField):
                chunks.append(
                    f'Content-Disposition: form-data; name="{part.name}"\r\n\r\n'.encode(
                        "utf-8"
                    )
                )
                chunks.append(f"{part.value}\r\n".encode("utf-8"))
            else:
                chunks.append(
                    f'Content-Disposition: form-data; name="{part.name}"; '
                    f'filename="{part.file.filename}"\r\n'.encode("utf-8")
                )
                chunks.append(
                    f"Content-Type: {part.file.content_type}\r\n\r\n".encode("utf-8")
                )
                chunks.append(part.file.data)
                chunks.append(b"\r\n")

        chunks.append(f"--{self.boundary}--\r\n".encode("utf-8"))
        return b"".join(chunks)


def parse_multipart(body: bytes, boundary: str) -> list[FormPart]:
    """Split a ``multipart/form-data`` body back into its parts.

    Raises:
        ValueError: If the body is not framed by ``boundary``.
    """
    delimiter = b"\r\n--" + boundary.encode("utf-8")
    sections = (b"\r\n" + body).split(delimiter)

    if len(sections) < 2 or sections[0] != b"" or not sections[-1].startswith(b"--"):
        raise ValueError("Body is not framed by the given boundary.")

    parts: list[FormPart] = []
    for section in sections[1:-1]:
        if not section.startswith(b"\r\n"):
            raise ValueError("Malformed part delimiter.")
        header_block, separator, content = section[2:].partition(b"\r\n\r\n")
        if not separator:
            raise ValueError("Part without a header block.")

        headers: dict[bytes, bytes] = {}
        for line in header_block.split(b"\r\n"):
            key, _, value = line.partition(b":")
            headers[key.strip().lower()] = value.strip()

        disposition = headers.get(b"content-disposition", b"")
        name_match = _DISPOSITION_NAME.search(disposition)
        if name_match is None:
            raise ValueError("Part without a name.")
        name = name_match.group(1).decode("utf-8")

        filename_match = _DISPOSITION_FILENAME.search(disposition)
        if filename_match is not None:
            content_type = headers.get(b"content-type", b"").decode("utf-8")
            parts.append(
                FormFile(
                    name,
                    MultipartFile(
                        data=content,
                        filename=filename_match.group(1).decode("utf-8"),
                        content_type=content_type or APPLICATION_OCTET_STREAM,
                    ),
                )
            )
        else:
            parts.append(FormField(name, content.decode("utf-8")))

    return parts


class MultipartDto(Dto):
    """A record sent as ``multipart/form-data``.

    Each instance draws its own boundary once, so ``headers()`` and
    ``to_data()`` always agree.
    """

    _boundary: str = PrivateAttr(default_factory=generate_boundary)

    @property
    def boundary(self) -> str:
        return self._boundary

    def headers(self) -> dict[str, str]:
        return multipart_headers(self._boundary)

    def to_form(self) -> Optional[FormData]:
        wire = self.to_wire_map()
        if wire is None:
            return None
        try:
            return FormData(wire, self._boundary)
        except (TypeError, ValueError):
            logger.warning(
                "Encoding %s failed, sending no form", type(self).__name__, exc_info=True
            )
            return None

    def to_data(self) -> Optional[bytes]:
        form = self.to_form()
        if form is None:
            return None
        return form.to_bytes()


class EasyMultipart(MultipartDto):
    """Sends any plain ``Dto`` as a multipart form."""

    dto: Dto

    def __init__(self, dto: Dto, **data: Any) -> None:
        super().__init__(dto=dto, **data)

    def wire_map(self) -> Mapping[str, Any]:
        return self.dto.to_wire_map() or {}
