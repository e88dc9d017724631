# Environment variables
ENV_BASE_URL = "XCONNECT_BASE_URL"
ENV_TIMEOUT = "XCONNECT_TIMEOUT"
ENV_DISABLE_SSL_VERIFY = "XCONNECT_DISABLE_SSL_VERIFY"

# Headers
HEADER_ACCEPT = "Accept"
HEADER_AUTHORIZATION = "Authorization"
HEADER_CACHE_CONTROL = "Cache-Control"
HEADER_CONTENT_TYPE = "Content-Type"
HEADER_USER_AGENT = "User-Agent"

# Content types
APPLICATION_JSON = "application/json"
APPLICATION_OCTET_STREAM = "application/octet-stream"
MULTIPART_FORM_DATA = "multipart/form-data"

# Status codes that never come off the wire
STATUS_SERVED_FROM_INTERCEPTOR = 298
STATUS_UNKNOWN = 299

# Multipart boundaries
BOUNDARY_PREFIX = "----WebKitFormBoundary"
BOUNDARY_LENGTH = 70

DEFAULT_TIMEOUT = 30.0
