"""Origin-trust gate for cookie-authenticated, state-changing requests

Session cookies are SameSite=strict, but older browsers and some proxies do
not honour that, so POST/PUT/DELETE/PATCH requests are also checked against
the Origin header (falling back to Referer). Requests carrying neither header
are allowed so that non-browser API clients keep working. This is a header
heuristic, not a token-based defence.
"""

from typing import Optional
from urllib.parse import urlsplit

from storefront.core.exceptions import CSRFValidationError

STATE_CHANGING_METHODS = frozenset({"POST", "PUT", "DELETE", "PATCH"})
DEFAULT_PORTS = {"http": 80, "https": 443}


def _host_of(url: str) -> Optional[str]:
    try:
        parts = urlsplit(url)
    except ValueError:
        return None
    if not parts.scheme or not parts.netloc:
        return None
    host = parts.netloc.rpartition("@")[2].lower()
    try:
        port = parts.port
    except ValueError:
        return None
    if port is not None and port == DEFAULT_PORTS.get(parts.scheme.lower()):
        host = host.rpartition(":")[0]
    return host


def check_origin(
    method: str,
    origin: Optional[str],
    referer: Optional[str],
    host: Optional[str],
) -> None:
    """
    Reject a cross-site state-changing request

    Args:
        method: HTTP method
        origin: Origin header, if sent
        referer: Referer header, if sent
        host: Host header of the request

    Raises:
        CSRFValidationError: If Origin (or Referer) names a different host
    """
    if method.upper() not in STATE_CHANGING_METHODS:
        return

    expected = (host or "").lower()

    if origin:
        origin_host = _host_of(origin)
        if origin_host is None:
            raise CSRFValidationError("Invalid origin format")
        if origin_host != expected:
            raise CSRFValidationError("Origin does not match host")
        return

    if referer:
        referer_host = _host_of(referer)
        if referer_host is None:
            raise CSRFValidationError("Invalid referer format")
        if referer_host != expected:
            raise CSRFValidationError("Invalid referer")


def is_trusted_origin(
    method: str,
    origin: Optional[str],
    referer: Optional[str],
    host: Optional[str],
) -> bool:
    """Boolean form of check_origin"""
    try:
        check_origin(method, origin, referer, host)
    except CSRFValidationError:
        return False
    return True
