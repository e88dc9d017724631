from typing import TYPE_CHECKING, Mapping, Optional, Union

from .._headers import HeaderTypes
from ._request_spec import CachePolicy, RequestDescriptor, merge_header_items
from ._url import XConnectUrl, merge_query

if TYPE_CHECKING:
    from .._forms import MultipartDto

QueryTypes = Optional[Mapping[str, str]]


def build_request(
    path: str,
    base_url: Union[str, XConnectUrl],
    *,
    method: str = "GET",
    query: QueryTypes = None,
    body: Optional[bytes] = None,
    headers: HeaderTypes = None,
    cache_policy: Optional[CachePolicy] = None,
) -> RequestDescriptor:
    """Compose one request descriptor from a path and a base URL.

    Args:
        path (str): Relative or absolute path. Empty means the base URL itself.
        base_url (Union[str, XConnectUrl]): The URL relative paths resolve against.
        method (str): The HTTP verb.
        query (Optional[Mapping[str, str]]): Parameters merged into the URL's query.
        body (Optional[bytes]): Raw body, attached verbatim.
        headers: Headers set on the request, last write wins per name.
        cache_policy (Optional[CachePolicy]): Only attached when given.

    Returns:
        RequestDescriptor: The composed request.

    Raises:
        InvalidURLError: If the path cannot be resolved to an absolute URL.
    """
    if not isinstance(base_url, XConnectUrl):
        base_url = XConnectUrl(base_url)

    url = merge_query(base_url.resolve(path), query)

    return RequestDescriptor(
        method=method,
        url=url,
        header_items=merge_header_items((), headers),
        content=body,
        cache_policy=cache_policy,
    )


def build_multipart_request(
    path: str,
    base_url: Union[str, XConnectUrl],
    *,
    method: str = "POST",
    query: QueryTypes = None,
    body: Optional["MultipartDto"] = None,
    headers: HeaderTypes = None,
    cache_policy: Optional[CachePolicy] = None,
) -> RequestDescriptor:
    """Compose a ``multipart/form-data`` request.

    The form's ``Content-Type`` and ``Accept`` headers take precedence over
    caller headers with the same names.
    """
    header_items = merge_header_items((), headers)
    if body is not None:
        header_items = merge_header_items(header_items, body.headers())

    return build_request(
        path,
        base_url,
        method=method,
        query=query,
        body=body.to_data() if body is not None else None,
        headers=header_items,
        cache_policy=cache_policy,
    )
