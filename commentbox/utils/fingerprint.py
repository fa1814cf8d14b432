import base64
import hashlib
from typing import Iterable, Optional

UNKNOWN_ADDRESS = "unknown"
CLIENT_ID_LENGTH = 24
# Only headers set by a trusted edge. X-Forwarded-For is client-controlled;
# proxied deployments resolve it through ProxyFix (PROXY_FIX_X_FOR) instead.
DEFAULT_ADDRESS_HEADERS = ("CF-Connecting-IP",)


def derive_client_id(address: Optional[str], user_agent: Optional[str], salt: str = "") -> str:
    """
    Stable pseudonymous id per client: base64(sha256(address + user_agent [+ salt]))[:24].
    Missing inputs fall back to fixed sentinels, so this never fails.
    """
    raw = f"{address or UNKNOWN_ADDRESS}{user_agent or ''}{salt or ''}"
    digest = hashlib.sha256(raw.encode("utf-8")).digest()
    return base64.b64encode(digest).decode("ascii")[:CLIENT_ID_LENGTH]


def client_address(req, headers: Iterable[str] = DEFAULT_ADDRESS_HEADERS) -> Optional[str]:
    for name in headers:
        value = (req.headers.get(name) or "").strip()
        if value:
            return value
    return req.remote_addr or None


def client_id_from_request(req, headers: Iterable[str] = DEFAULT_ADDRESS_HEADERS, salt: str = "") -> str:
    return derive_client_id(client_address(req, headers), req.headers.get("User-Agent"), salt)
