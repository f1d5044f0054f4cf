"""Shapes of the JSON records exchanged with the marketplace API."""

from __future__ import annotations

from typing import Any, TypedDict


class Pagination(TypedDict):
    page: int
    limit: int
    total: int
    totalPages: int
    hasMore: bool


class Skill(TypedDict, total=False):
    id: str
    title: str
    slug: str
    description: str
    price: str
    currency: str
    category: str
    categoryName: str
    creator: str
    creatorId: str
    rating: float
    reviews: int
    sales: int
    downloads: int
    image: str
    tags: list[str]
    featured: bool
    staffPick: bool
    createdAt: str
    updatedAt: str


class SkillDetails(Skill, total=False):
    shortDesc: str | None
    pricingModel: str
    thumbnailUrl: str | None
    screenshots: list[dict[str, Any]]
    demoUrl: str | None
    docsUrl: str | None
    repoUrl: str | None
    requirements: str | None
    currentVersion: dict[str, Any] | None
    publishedAt: str | None


class ListSkillsResponse(TypedDict):
    skills: list[Skill]
    pagination: Pagination


class BuySkillResponse(TypedDict, total=False):
    purchaseId: str
    skillId: str
    licenseKey: str
    status: str  # completed | pending_approval | failed
    message: str
    installedPath: str


class CreateSkillResponse(TypedDict, total=False):
    id: str
    slug: str
    title: str
    description: str
    price: str
    currency: str
    category: str
    status: str
    createdAt: str


class DownloadInfo(TypedDict, total=False):
    packageUrl: str
    licenseKey: str
    activations: int
    maxActivations: int
    version: str


class ActivationResult(TypedDict, total=False):
    success: bool
    activationId: str
    activations: int
    maxActivations: int
    message: str


class UploadResult(TypedDict, total=False):
    url: str
    packageUrl: str
    size: int
    sha256: str


class Soul(TypedDict, total=False):
    id: str
    slug: str
    name: str
    description: str
    content: str  # only present on single-item fetch
    price: str
    author: str
    downloads: int
    category: str | None
    tags: list[str]
    createdAt: str


class ListSoulsResponse(TypedDict):
    souls: list[Soul]
    pagination: Pagination


class Purchase(TypedDict, total=False):
    id: str
    skill: dict[str, Any]
    amount: float
    fee: float
    currency: str
    status: str
    licenseKey: str | None
    licenseType: str | None
    isValid: bool
    purchasedAt: str


class PurchasesResponse(TypedDict):
    purchases: list[Purchase]
    pagination: Pagination


class WalletBalance(TypedDict, total=False):
    # The backend has been seen sending these as strings; wallet.balance() coerces them.
    balance: float
    pendingBalance: float
    lockedBalance: float
    availableBalance: float
    currency: str
    depositAddress: str | None
    depositChain: str
    totalDeposits: float
    totalWithdrawals: float
    totalSpent: float
    totalEarned: float


class DepositInfo(TypedDict, total=False):
    address: str
    chain: str
    currency: str
    balance: str
    qrCode: str
    hasAddress: bool
    supportedChains: list[str]


class Withdrawal(TypedDict, total=False):
    id: str
    amount: float
    fee: float
    totalAmount: float
    currency: str
    network: str
    destinationAddress: str
    status: str
    txHash: str | None
    createdAt: str
    completedAt: str | None


class WithdrawalsResponse(TypedDict, total=False):
    withdrawals: list[Withdrawal]
    pagination: dict[str, Any]


class Category(TypedDict, total=False):
    id: str
    name: str
    slug: str
    description: str | None
    icon: str | None
    color: str | None
    listingCount: int


class CategoriesResponse(TypedDict):
    categories: list[Category]


class AgentInfo(TypedDict, total=False):
    id: str
    agentId: str
    name: str | None
    permissions: list[str]
    status: str
    claimed: bool
    wallet: dict[str, Any] | None
    createdAt: str


class AgentStatus(TypedDict, total=False):
    registered: bool
    claimed: bool
    hasBalance: bool


class Review(TypedDict, total=False):
    id: str
    rating: int
    title: str | None
    body: str
    user: dict[str, Any]
    createdAt: str
    helpful: int


class ReviewsResponse(TypedDict, total=False):
    reviews: list[Review]
    pagination: dict[str, Any]
    stats: dict[str, Any]


class LicenseValidation(TypedDict, total=False):
    valid: bool
    license: dict[str, Any]
    error: str


class RegisterAgentResponse(TypedDict, total=False):
    apiKey: str
    agentId: str
    depositAddress: str
    chain: str
    currency: str
    message: str
