from __future__ import annotations

import json
import logging
from typing import Any, Mapping

import httpx

from .config import (
    AGENT_ID_HEADER,
    API_KEY_HEADER,
    DEFAULT_BASE_URL,
    DEFAULT_TIMEOUT_S,
    LICENSE_KEY_HEADER,
    redact_token,
)
from .errors import ClawgetError, ConfigurationError, TransportError
from .resources import (
    AgentAPI,
    CategoriesAPI,
    LicensesAPI,
    PurchasesAPI,
    ReviewsAPI,
    SkillsAPI,
    SoulsAPI,
    WalletAPI,
)
from .types import RegisterAgentResponse

__all__ = [
    "Clawget",
    "ClawgetError",
    "ConfigurationError",
    "TransportError",
    "API_KEY_HEADER",
    "AGENT_ID_HEADER",
    "LICENSE_KEY_HEADER",
]

logger = logging.getLogger("clawget.http")

REGISTER_PATH = "/v1/agents/register"
MAX_REDIRECTS = 5


def _error_message(body: Any, fallback: str = "Request failed") -> str:
    if isinstance(body, Mapping):
        for key in ("error", "message"):
            value = body.get(key)
            if isinstance(value, Mapping):
                value = value.get("message")
            if isinstance(value, str) and value.strip():
                return value.strip()
    return fallback


def _decode(resp: httpx.Response) -> Any:
    try:
        return resp.json()
    except (json.JSONDecodeError, UnicodeDecodeError) as e:
        raise ClawgetError(f"Invalid JSON response: {e}") from e


def _check(resp: httpx.Response, body: Any, *, fallback: str = "Request failed") -> Any:
    if not resp.is_success:
        raise ClawgetError(_error_message(body, fallback), resp.status_code, body)
    return body


class Clawget:
    """
    Client for the Clawget marketplace API.

    Example:
        with Clawget(api_key="clg_...") as client:
            page = client.skills.list(query="scraper", limit=5)
    """

    def __init__(
        self,
        api_key: str | None,
        *,
        base_url: str | None = None,
        agent_id: str | None = None,
        timeout_s: float = DEFAULT_TIMEOUT_S,
    ) -> None:
        if not api_key or not api_key.strip():
            raise ConfigurationError("API key is required")
        self.api_key = api_key.strip()
        self.base_url = (base_url or DEFAULT_BASE_URL).rstrip("/")
        self.agent_id = agent_id
        self.timeout_s = timeout_s

        self._http = httpx.Client(timeout=timeout_s)

        self.skills = SkillsAPI(self)
        self.souls = SoulsAPI(self)
        self.wallet = WalletAPI(self)
        self.purchases = PurchasesAPI(self)
        self.categories = CategoriesAPI(self)
        self.agent = AgentAPI(self)
        self.reviews = ReviewsAPI(self)
        self.licenses = LicensesAPI(self)

    def close(self) -> None:
        self._http.close()

    def __enter__(self) -> "Clawget":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()

    def __repr__(self) -> str:
        return f"Clawget(base_url={self.base_url!r}, api_key={redact_token(self.api_key)!r})"

    def _url(self, path: str) -> str:
        if path.startswith(("http://", "https://")):
            return path
        if not path.startswith("/"):
            path = "/" + path
        return f"{self.base_url}{path}"

    def _headers(self, extra: Mapping[str, str] | None, *, auth: bool, json_content: bool) -> dict[str, str]:
        headers: dict[str, str] = {}
        if json_content:
            headers["Content-Type"] = "application/json"
        if self.agent_id:
            headers[AGENT_ID_HEADER] = self.agent_id
        if extra:
            headers.update(extra)
        if auth:
            # Applied last: callers cannot drop or replace the API key.
            for k in [k for k in headers if k.lower() == API_KEY_HEADER]:
                del headers[k]
            headers[API_KEY_HEADER] = self.api_key
        return headers

    def _same_origin(self, url: httpx.URL) -> bool:
        base = httpx.URL(self.base_url)
        return (url.scheme, url.host, url.port) == (base.scheme, base.host, base.port)

    def _exchange(self, method: str, url: httpx.URL, *, headers: dict[str, str], **kwargs: Any) -> httpx.Response:
        """
        Send one request, following redirects by hand.

        The API key never leaves the API's origin: it is dropped from the
        headers as soon as a redirect points at another host.
        """
        resp = self._http.request(method, url, headers=headers, follow_redirects=False, **kwargs)
        for _ in range(MAX_REDIRECTS):
            if not resp.has_redirect_location:
                return resp
            url = resp.url.join(resp.headers["location"])
            if not self._same_origin(url):
                headers = {k: v for k, v in headers.items() if k.lower() != API_KEY_HEADER}
            if resp.status_code == 303 or (resp.status_code in (301, 302) and method != "GET"):
                method = "GET"
                kwargs = {}
                headers = {k: v for k, v in headers.items() if k.lower() != "content-type"}
            else:
                kwargs.pop("params", None)
            logger.debug("redirect %s -> %s", resp.status_code, url)
            resp.close()
            resp = self._http.request(method, url, headers=headers, follow_redirects=False, **kwargs)
        if resp.has_redirect_location:
            raise TransportError(f"Too many redirects (more than {MAX_REDIRECTS})")
        return resp

    def _send(
        self,
        method: str,
        path: str,
        *,
        params: Mapping[str, Any] | None = None,
        content: bytes | None = None,
        files: Mapping[str, Any] | None = None,
        data: Mapping[str, Any] | None = None,
        headers: Mapping[str, str] | None = None,
        auth: bool = True,
    ) -> Any:
        url = self._url(path)
        req_headers = self._headers(headers, auth=auth, json_content=files is None)
        query = {k: v for k, v in (params or {}).items() if v is not None}

        try:
            resp = self._exchange(
                method.upper(),
                httpx.URL(url),
                params=query or None,
                content=content,
                files=files,
                data=data,
                headers=req_headers,
            )
        except httpx.HTTPError as e:
            logger.debug("%s %s failed: %s", method.upper(), url, e)
            raise TransportError(f"Request failed: {e}") from e

        logger.debug(
            "%s %s -> %s (key=%s)",
            method.upper(),
            resp.request.url,
            resp.status_code,
            redact_token(self.api_key) if auth else "-",
        )
        return _check(resp, _decode(resp))

    def request(
        self,
        path: str,
        method: str = "GET",
        body: Any | None = None,
        headers: Mapping[str, str] | None = None,
        *,
        params: Mapping[str, Any] | None = None,
        auth: bool = True,
    ) -> Any:
        """
        Perform one JSON request and return the decoded body.

        No envelope unwrapping happens here; resource methods decide how to read
        the body. Raises ClawgetError (status_code set) on non-2xx responses and
        TransportError when no response arrived.
        """
        content = None
        if body is not None:
            content = json.dumps(body, ensure_ascii=False).encode("utf-8")
        return self._send(method, path, params=params, content=content, headers=headers, auth=auth)

    def download_bytes(self, url: str) -> bytes:
        """Fetch a package archive. The API key is only sent to the API's own origin."""
        full = httpx.URL(self._url(url))
        headers = {API_KEY_HEADER: self.api_key} if self._same_origin(full) else {}
        try:
            resp = self._exchange("GET", full, headers=headers)
        except httpx.HTTPError as e:
            raise TransportError(f"Download failed: {e}") from e
        logger.debug("GET %s -> %s (%d bytes)", full, resp.status_code, len(resp.content))
        if not resp.is_success:
            try:
                body: Any = resp.json()
            except (json.JSONDecodeError, UnicodeDecodeError):
                body = None
            raise ClawgetError(_error_message(body, "Download failed"), resp.status_code, body)
        return resp.content

    @staticmethod
    def register(
        *,
        name: str | None = None,
        platform: str = "sdk",
        agent_id: str | None = None,
        base_url: str = DEFAULT_BASE_URL,
        timeout_s: float = DEFAULT_TIMEOUT_S,
        transport: httpx.BaseTransport | None = None,
    ) -> RegisterAgentResponse:
        """Register a new agent. No API key is needed; the issued key is only shown in this response."""
        payload: dict[str, Any] = {"platform": platform or "sdk"}
        if name is not None:
            payload["name"] = name
        if agent_id is not None:
            payload["agentId"] = agent_id

        url = f"{base_url.rstrip('/')}{REGISTER_PATH}"
        try:
            with httpx.Client(timeout=timeout_s, transport=transport) as http:
                resp = http.post(url, json=payload)
        except httpx.HTTPError as e:
            raise TransportError(f"Registration failed: {e}") from e

        body = _check(resp, _decode(resp), fallback="Registration failed")
        return map_registration(body)


def map_registration(body: Any) -> RegisterAgentResponse:
    """Flatten either registration response shape into RegisterAgentResponse."""
    if not isinstance(body, Mapping):
        raise ClawgetError("Unexpected registration response", response=body)
    if "apiKey" in body:
        return dict(body)  # type: ignore[return-value]

    agent = body.get("agent") if isinstance(body.get("agent"), Mapping) else {}
    wallet = body.get("wallet") if isinstance(body.get("wallet"), Mapping) else {}

    def first(src: Mapping[str, Any], *keys: str) -> Any:
        for k in keys:
            if src.get(k) is not None:
                return src[k]
        return None

    out: RegisterAgentResponse = {
        "apiKey": first(agent, "api_key", "apiKey"),
        "agentId": first(agent, "agent_id", "agentId", "id"),
        "depositAddress": first(wallet, "deposit_address", "depositAddress"),
        "chain": first(wallet, "chain"),
        "currency": first(wallet, "currency"),
    }
    if body.get("message") is not None:
        out["message"] = body["message"]
    if not out["apiKey"]:
        raise ClawgetError("Registration response did not include an API key", response=body)
    return out
