import mimetypes
from dataclasses import dataclass
from pathlib import Path, PurePath
from typing import Callable, Optional, Union

from .._utils.constants import APPLICATION_OCTET_STREAM

MimeResolver = Callable[[str], Optional[str]]


def guess_content_type(filename: str) -> Optional[str]:
    """Look up a content type from the file extension, or ``None`` if unknown."""
    content_type, _ = mimetypes.guess_type(filename, strict=False)
    return content_type


@dataclass(frozen=True)
class MultipartFile:
    """A file to upload as one part of a ``multipart/form-data`` body."""

    data: bytes
    filename: str
    content_type: str = APPLICATION_OCTET_STREAM

    @classmethod
    def from_bytes(
        cls,
        data: bytes,
        filename: str,
        content_type: Optional[str] = None,
        resolver: MimeResolver = guess_content_type,
    ) -> "MultipartFile":
        return cls(
            data=data,
            filename=filename,
            content_type=content_type or resolver(filename) or APPLICATION_OCTET_STREAM,
        )

    @classmethod
    def from_path(
        cls,
        path: Union[str, PurePath],
        content_type: Optional[str] = None,
        resolver: MimeResolver = guess_content_type,
    ) -> "MultipartFile":
        """Read a file from disk, naming the part after the file's basename.

        Raises:
            OSError: If the file cannot be read.
        """
        file_path = Path(path)
        return cls.from_bytes(
            file_path.read_bytes(),
            file_path.name,
            content_type=content_type,
            resolver=resolver,
        )

    def __repr__(self) -> str:
        return (
            f"MultipartFile(filename={self.filename!r}, "
            f"content_type={self.content_type!r}, size={len(self.data)})"
        )
