from ._request_spec import RequestDescriptor


def _escape_double_quoted(value: str) -> str:
    return value.replace("\\", "\\\\").replace('"', '\\"')


def _escape_single_quoted(value: str) -> str:
    return value.replace("'", "'\\''")


def to_curl(request: RequestDescriptor) -> str:
    """Render a request as an equivalent ``curl`` command line.

    >>> to_curl(RequestDescriptor("GET", "https://api.example.com/data"))
    'curl -X GET "https://api.example.com/data"'
    """
    parts = [f'curl -X {request.method} "{request.url}"']

    for key, value in request.header_items:
        parts.append(f'-H "{_escape_double_quoted(key)}: {_escape_double_quoted(value)}"')

    if request.content is not None:
        try:
            text = request.content.decode("utf-8")
        except UnicodeDecodeError:
            escaped = "".join(f"\\x{byte:02X}" for byte in request.content)
            parts.append(f"--data-binary $'{escaped}'")
        else:
            parts.append(f"-d '{_escape_single_quoted(text)}'")

    return " ".join(parts)
