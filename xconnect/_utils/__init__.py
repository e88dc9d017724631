from ._converter import decode_payload, decode_response
from ._curl import to_curl
from ._logs import setup_logging
from ._pretty import ErrorReporter, format_decoding_error, pretty_error
from ._request_builder import build_multipart_request, build_request
from ._request_spec import CachePolicy, RequestDescriptor
from ._url import XConnectUrl, merge_query
from ._user_agent import header_user_agent, user_agent_value

__all__ = [
    "CachePolicy",
    "ErrorReporter",
    "RequestDescriptor",
    "XConnectUrl",
    "build_multipart_request",
    "build_request",
    "decode_payload",
    "decode_response",
    "format_decoding_error",
    "header_user_agent",
    "merge_query",
    "pretty_error",
    "setup_logging",
    "to_curl",
    "user_agent_value",
]
