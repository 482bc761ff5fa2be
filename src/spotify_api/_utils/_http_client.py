import os
import ssl
from typing import Any, Dict, Optional

import certifi
import httpx

from .constants import DEFAULT_TIMEOUT

# first match wins for the CA bundle file
CA_FILE_VARIABLES = ("SSL_CERT_FILE", "REQUESTS_CA_BUNDLE")
CA_DIR_VARIABLE = "SSL_CERT_DIR"


def _env_path(name: str) -> Optional[str]:
    value = os.environ.get(name)
    if not value:
        return None
    return os.path.expanduser(os.path.expandvars(value))


def get_httpx_client_kwargs(timeout: Optional[float] = None) -> Dict[str, Any]:
    """Keyword arguments shared by every httpx client the runtime creates.

    Certificates come from the bundle named by ``SSL_CERT_FILE`` or
    ``REQUESTS_CA_BUNDLE`` (plus ``SSL_CERT_DIR``), else from certifi.
    """
    ca_file = next(
        (path for path in map(_env_path, CA_FILE_VARIABLES) if path), certifi.where()
    )
    verify = ssl.create_default_context(
        cafile=ca_file, capath=_env_path(CA_DIR_VARIABLE)
    )
    return {
        "verify": verify,
        "timeout": httpx.Timeout(timeout if timeout is not None else DEFAULT_TIMEOUT),
        "follow_redirects": True,
    }
