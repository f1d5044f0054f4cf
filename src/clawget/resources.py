"""
Grouped API operations exposed on a :class:`clawget.Clawget` instance.

Each method maps onto one HTTP call through ``Clawget.request``; the only
exception is ``skills.create`` which may look up the category first.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any, Iterable
from urllib.parse import quote

from .config import LICENSE_KEY_HEADER
from .envelope import as_list, normalize_pagination, pick, unwrap
from .errors import ConfigurationError
from .types import (
    ActivationResult,
    AgentInfo,
    AgentStatus,
    BuySkillResponse,
    CategoriesResponse,
    CreateSkillResponse,
    DepositInfo,
    DownloadInfo,
    LicenseValidation,
    ListSkillsResponse,
    ListSoulsResponse,
    PurchasesResponse,
    Review,
    ReviewsResponse,
    Skill,
    SkillDetails,
    Soul,
    UploadResult,
    WalletBalance,
    WithdrawalsResponse,
)

if TYPE_CHECKING:
    from .client import Clawget

logger = logging.getLogger(__name__)

DEFAULT_DEPOSIT_CHAIN = "TRON"
DEFAULT_DEPOSIT_CURRENCY = "USDT"
DEFAULT_SKILL_CURRENCY = "USDC"

BALANCE_FIELDS = (
    "balance",
    "pendingBalance",
    "lockedBalance",
    "availableBalance",
    "totalDeposits",
    "totalWithdrawals",
    "totalSpent",
    "totalEarned",
)


def _seg(value: str) -> str:
    return quote(str(value), safe="")


def _compact(d: dict[str, Any]) -> dict[str, Any]:
    return {k: v for k, v in d.items() if v is not None}


def _record(body: Any, key: str) -> dict[str, Any]:
    """The object under ``key``, or the unwrapped body when no ``key`` is present; ``{}`` if that is not an object."""
    found = unwrap(body, key)
    value = found[key] if found else unwrap(body)
    return value if isinstance(value, dict) else {}


def _coerce_number(name: str, value: Any) -> Any:
    if isinstance(value, bool) or not isinstance(value, str):
        return value
    try:
        return float(value.strip())
    except ValueError:
        logger.warning("wallet balance field %s is not numeric: %r", name, value)
        return value


class _Resource:
    def __init__(self, client: "Clawget") -> None:
        self._client = client


class SkillsAPI(_Resource):
    """Browse, buy, create and deliver skills."""

    def list(
        self,
        *,
        category: str | None = None,
        query: str | None = None,
        min_price: float | None = None,
        max_price: float | None = None,
        sort_by: str | None = None,  # price | rating | popular | newest
        sort_order: str | None = None,  # asc | desc
        page: int | None = None,
        limit: int | None = None,
    ) -> ListSkillsResponse:
        params = _compact(
            {
                "category": category or None,
                "q": query or None,
                "minPrice": min_price,
                "maxPrice": max_price,
                "sortBy": sort_by,
                "sortOrder": sort_order,
                "page": page or None,
                "limit": limit or None,
            }
        )
        body = self._client.request("/skills", params=params)
        found = unwrap(body, "listings", "skills", "pagination")
        listings = found.get("listings", found.get("skills"))
        return {
            "skills": as_list(listings),
            "pagination": normalize_pagination(found.get("pagination"), page=page, limit=limit),
        }

    def get(self, id_or_slug: str) -> SkillDetails:
        body = self._client.request(f"/listings/{_seg(id_or_slug)}")
        return unwrap(body)

    def buy(self, skill_id: str, *, auto_install: bool = False) -> BuySkillResponse:
        return self._client.request(
            "/skills/buy",
            method="POST",
            body={"skillId": skill_id, "autoInstall": bool(auto_install)},
        )

    def download(self, skill_id: str) -> DownloadInfo:
        body = self._client.request(f"/skills/{_seg(skill_id)}/download")
        return unwrap(body)

    def featured(self, limit: int = 10) -> list[Skill]:
        body = self._client.request("/skills/featured", params={"limit": limit})
        return as_list(pick(body, "listings", "skills"))

    def free(self, limit: int = 10) -> list[Skill]:
        body = self._client.request("/skills/free", params={"limit": limit})
        return as_list(pick(body, "skills", "listings"))

    def create(
        self,
        *,
        name: str,
        description: str,
        price: float,
        category_id: str | None = None,
        category: str | None = None,
        short_desc: str | None = None,
        thumbnail_url: str | None = None,
        currency: str | None = None,
        pricing_model: str | None = None,
    ) -> CreateSkillResponse:
        if not category_id and category:
            category_id = self._resolve_category(category)
        if not category_id:
            raise ConfigurationError("Either category_id or category name is required")

        payload = _compact(
            {
                "title": name,
                "description": description,
                "shortDesc": short_desc,
                "price": price,
                "categoryId": category_id,
                "thumbnailUrl": thumbnail_url,
                "currency": currency or DEFAULT_SKILL_CURRENCY,
                "pricingModel": pricing_model,
            }
        )
        return unwrap(self._client.request("/skills", method="POST", body=payload))

    def _resolve_category(self, wanted: str) -> str:
        categories = self._client.categories.list()["categories"]
        needle = wanted.strip().lower()
        for c in categories:
            if not isinstance(c, dict):
                continue
            slug = str(c.get("slug") or "")
            name = str(c.get("name") or "")
            if slug.lower() == needle or name.lower() == needle:
                return str(c.get("id"))
        raise ConfigurationError(f"Category not found: {wanted}")

    def activate(
        self,
        license_key: str,
        *,
        device_id: str,
        device_info: dict[str, Any] | None = None,
    ) -> ActivationResult:
        # Authenticated by the license key, not the API key.
        return self._client.request(
            "/licenses/activate",
            method="POST",
            body=_compact({"deviceId": device_id, "deviceInfo": device_info}),
            headers={LICENSE_KEY_HEADER: license_key},
            auth=False,
        )

    def upload_package(
        self,
        data: bytes,
        *,
        filename: str = "package.zip",
        content_type: str = "application/zip",
        fields: dict[str, Any] | None = None,
    ) -> UploadResult:
        files = {"file": (filename, data, content_type)}
        form = {k: str(v) for k, v in (fields or {}).items() if v is not None}
        body = self._client._send("POST", "/skills/upload", files=files, data=form or None)
        return unwrap(body)


class SoulsAPI(_Resource):
    """SOUL documents. list/get/create live under /v1/souls, buy still under /souls."""

    def list(
        self,
        *,
        category: str | None = None,
        tags: str | Iterable[str] | None = None,
        query: str | None = None,
        page: int | None = None,
        limit: int | None = None,
    ) -> ListSoulsResponse:
        if tags is not None and not isinstance(tags, str):
            tags = ",".join(tags)
        params = _compact(
            {
                "category": category or None,
                "tags": tags or None,
                "q": query or None,
                "page": page or None,
                "limit": limit or None,
            }
        )
        body = self._client.request("/v1/souls", params=params)
        found = unwrap(body, "souls", "pagination")
        return {
            "souls": as_list(found.get("souls")),
            "pagination": normalize_pagination(found.get("pagination"), page=page, limit=limit),
        }

    def get(self, slug: str) -> Soul:
        body = self._client.request(f"/v1/souls/{_seg(slug)}")
        return _record(body, "soul")

    def buy(self, soul_id: str) -> dict[str, Any]:
        return self._client.request("/souls/buy", method="POST", body={"soulId": soul_id})

    def create(
        self,
        *,
        name: str,
        description: str,
        content: str,
        price: float = 0,
        category: str | None = None,
        tags: Iterable[str] | None = None,
    ) -> Soul:
        payload = _compact(
            {
                "name": name,
                "description": description,
                "content": content,
                "price": price,
                "category": category,
                "tags": list(tags or []),
            }
        )
        body = self._client.request("/v1/souls", method="POST", body=payload)
        return _record(body, "soul")


class WalletAPI(_Resource):
    def balance(self) -> WalletBalance:
        body = unwrap(self._client.request("/wallet/balance"))
        if not isinstance(body, dict):
            return body
        out = dict(body)
        for name in BALANCE_FIELDS:
            if name in out:
                out[name] = _coerce_number(name, out[name])
        return out  # type: ignore[return-value]

    def deposit(self) -> DepositInfo:
        body = unwrap(self._client.request("/wallet/deposit"))
        out = dict(body) if isinstance(body, dict) else {}
        out["chain"] = out.get("chain") or DEFAULT_DEPOSIT_CHAIN
        out["currency"] = out.get("currency") or DEFAULT_DEPOSIT_CURRENCY
        return out  # type: ignore[return-value]

    def withdraw(self, *, amount: float, address: str, network: str | None = None) -> dict[str, Any]:
        if amount <= 0:
            raise ConfigurationError("Withdrawal amount must be positive")
        body = self._client.request(
            "/wallet/withdraw",
            method="POST",
            body=_compact({"amount": amount, "destinationAddress": address, "network": network}),
        )
        return unwrap(body)

    def withdrawals(self, *, page: int | None = None, limit: int | None = None) -> WithdrawalsResponse:
        body = self._client.request("/wallet/withdrawals", params=_compact({"page": page, "limit": limit}))
        found = unwrap(body, "withdrawals")
        out: WithdrawalsResponse = {"withdrawals": as_list(found.get("withdrawals"))}
        if isinstance(found.get("pagination"), dict):
            out["pagination"] = found["pagination"]
        return out

    def donate(self, *, amount: float, message: str | None = None, recipient: str | None = None) -> dict[str, Any]:
        if amount <= 0:
            raise ConfigurationError("Donation amount must be positive")
        body = self._client.request(
            "/v1/donate",
            method="POST",
            body=_compact({"amount": amount, "message": message, "recipient": recipient}),
        )
        return unwrap(body)

    def donation_stats(self) -> dict[str, Any]:
        return unwrap(self._client.request("/v1/donate"))


class PurchasesAPI(_Resource):
    def list(self, *, page: int | None = None, limit: int | None = None) -> PurchasesResponse:
        body = self._client.request("/purchases", params=_compact({"page": page or None, "limit": limit or None}))
        found = unwrap(body, "purchases", "pagination")
        return {
            "purchases": as_list(found.get("purchases")),
            "pagination": normalize_pagination(found.get("pagination"), page=page, limit=limit),
        }


class CategoriesAPI(_Resource):
    def list(self) -> CategoriesResponse:
        # Order comes from the backend and is kept as-is.
        body = self._client.request("/categories")
        return {"categories": as_list(pick(body, "categories"))}


class AgentAPI(_Resource):
    def me(self) -> AgentInfo:
        """
        GET /v1/agents/me.

        The backend currently rejects API-key auth on this route and answers 401;
        use status() or get_profile() until that is fixed server-side.
        """
        body = self._client.request("/v1/agents/me")
        return _record(body, "agent")

    def status(self) -> AgentStatus:
        return unwrap(self._client.request("/v1/agents/status"))

    def get_profile(self) -> dict[str, Any]:
        body = self._client.request("/v1/agents/profile")
        return _record(body, "profile")

    def update_profile(self, **fields: Any) -> dict[str, Any]:
        body = self._client.request("/v1/agents/profile", method="PUT", body=_compact(fields))
        return _record(body, "profile")

    def get_public_profile(self, agent_id: str) -> dict[str, Any]:
        body = self._client.request(f"/v1/agents/{_seg(agent_id)}/profile")
        return _record(body, "profile")


class ReviewsAPI(_Resource):
    def list(self, skill_id: str, *, page: int | None = None, limit: int | None = None) -> ReviewsResponse:
        return self._client.request(
            f"/listings/{_seg(skill_id)}/reviews",
            params=_compact({"page": page or None, "limit": limit or None}),
        )

    def create(self, *, skill_id: str, rating: int, body: str, title: str | None = None) -> Review:
        if isinstance(rating, bool) or not isinstance(rating, int) or not 1 <= rating <= 5:
            raise ConfigurationError("Rating must be an integer between 1 and 5")
        resp = self._client.request(
            "/reviews",
            method="POST",
            body=_compact({"listingId": skill_id, "rating": rating, "title": title, "body": body}),
        )
        return _record(resp, "review")


class LicensesAPI(_Resource):
    def validate(self, license_key: str) -> LicenseValidation:
        return self._client.request("/licenses/validate", method="POST", body={"licenseKey": license_key})
