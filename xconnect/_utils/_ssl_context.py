import os
import ssl
from typing import Any, Dict, Optional

import certifi

from .constants import DEFAULT_TIMEOUT, ENV_DISABLE_SSL_VERIFY


def expand_path(path):
    """Expand environment variables and user home directory in path."""
    if not path:
        return path
    path = os.path.expandvars(path)
    path = os.path.expanduser(path)
    return path


def create_ssl_context() -> ssl.SSLContext:
    ssl_cert_file = expand_path(os.environ.get("SSL_CERT_FILE"))
    requests_ca_bundle = expand_path(os.environ.get("REQUESTS_CA_BUNDLE"))
    ssl_cert_dir = expand_path(os.environ.get("SSL_CERT_DIR"))

    return ssl.create_default_context(
        cafile=ssl_cert_file or requests_ca_bundle or certifi.where(),
        capath=ssl_cert_dir,
    )


def ssl_verification_disabled() -> bool:
    disable_ssl_env = os.environ.get(ENV_DISABLE_SSL_VERIFY, "").lower()
    return disable_ssl_env in ("1", "true", "yes", "on")


def get_httpx_client_kwargs(
    timeout: Optional[float] = None, verify_ssl: Optional[bool] = None
) -> Dict[str, Any]:
    """Get standardized httpx client configuration."""
    client_kwargs: Dict[str, Any] = {
        "follow_redirects": True,
        "timeout": timeout if timeout is not None else DEFAULT_TIMEOUT,
    }

    if verify_ssl is None:
        verify_ssl = not ssl_verification_disabled()

    if verify_ssl:
        client_kwargs["verify"] = create_ssl_context()
    else:
        client_kwargs["verify"] = False

    # HTTP_PROXY, HTTPS_PROXY, NO_PROXY are read by httpx by default

    return client_kwargs
