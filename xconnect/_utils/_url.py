import re
from typing import Mapping, Optional
from urllib.parse import quote, unquote, urljoin, urlsplit, urlunsplit

from ..models.exceptions import InvalidURLError

# Characters that may never appear unescaped in a URI reference (RFC 3986).
_DISALLOWED_CHARACTERS = re.compile(r"[\s\x00-\x1f\x7f\"<>\\^`{|}]")
_BROKEN_PERCENT_ESCAPE = re.compile(r"%(?![0-9A-Fa-f]{2})")


class XConnectUrl:
    """A base URL that relative request paths are resolved against.

    >>> url = XConnectUrl("https://api.example.com/v1/")
    >>> url.resolve("users")
    'https://api.example.com/v1/users'
    >>> url.resolve("")
    'https://api.example.com/v1/'

    Args:
        url (str): The base URL. It must be absolute.
    """

    def __init__(self, url: str):
        self._url = url

    def __str__(self):
        return self._url

    def __repr__(self):
        return f"XConnectUrl({self._url})"

    def __eq__(self, other: object):
        if not isinstance(other, XConnectUrl):
            return NotImplemented

        return self._url == str(other)

    def __hash__(self):
        return hash(self._url)

    def resolve(self, path: str) -> str:
        """Resolve ``path`` against this base URL.

        An empty path yields the base URL verbatim. Anything else is joined
        with standard URL-join semantics, so absolute URLs replace the base
        and relative ones are resolved against its path.

        Raises:
            InvalidURLError: If the path is not a well-formed URI reference, or
                the result is not an absolute URL with a scheme and a host.
        """
        if not path:
            resolved = self._url
        else:
            if not is_well_formed(path):
                raise InvalidURLError(path, self._url, "malformed URI reference")
            resolved = urljoin(self._url, path)

        if not resolved:
            raise InvalidURLError(path, self._url)

        parsed = urlsplit(resolved)
        if not parsed.scheme:
            raise InvalidURLError(path, self._url, "missing scheme")
        if not parsed.netloc:
            raise InvalidURLError(path, self._url, "missing host")

        return resolved


def is_well_formed(reference: str) -> bool:
    """Whether ``reference`` only uses characters a URI reference may carry."""
    if _DISALLOWED_CHARACTERS.search(reference):
        return False
    if _BROKEN_PERCENT_ESCAPE.search(reference):
        return False
    return True


def merge_query(url: str, query: Optional[Mapping[str, str]]) -> str:
    """Merge ``query`` into the query string already present on ``url``.

    Existing parameters keep their position. A caller-supplied parameter
    that shares a name with an existing one replaces the first occurrence's
    value; new names are appended in the order given. Untouched parameters
    are kept byte-for-byte, so a literal ``+`` stays a ``+``. Without a query
    the URL is returned untouched.
    """
    if not query:
        return url

    parts = urlsplit(url)
    segments = parts.query.split("&") if parts.query else []

    for key, value in query.items():
        if value is None:
            continue
        entry = f"{quote(key, safe='')}={quote(str(value), safe='')}"
        for index, segment in enumerate(segments):
            if unquote(segment.partition("=")[0]) == key:
                segments[index] = entry
                break
        else:
            segments.append(entry)

    return urlunsplit(parts._replace(query="&".join(segments)))
