from __future__ import annotations

import argparse
import json
import logging
import os
import platform
import sys
import textwrap
from dataclasses import dataclass, replace
from pathlib import Path
from typing import Any, Callable

from ._version import __version__
from .client import Clawget, ClawgetError, TransportError
from .config import (
    API_KEY_ENV,
    BASE_URL_ENV,
    DEFAULT_BASE_URL,
    DEFAULT_INSTALL_DIR,
    Config,
    config_path,
    load_config,
    redact_token,
    save_config,
)
from .output import OutputContext
from .skill_package import SkillPackageError, install_package, package_skill
from .suggest import suggest

EXIT_OK = 0
EXIT_ERROR = 1
# 2 is left to argparse usage errors.
EXIT_NETWORK = 3
EXIT_INSUFFICIENT_BALANCE = 4
EXIT_NOT_FOUND = 5
EXIT_CONFLICT = 6
EXIT_ABORTED = 130

SITE_URL = "https://clawget.io"
AUTH_HINT = f"Set {API_KEY_ENV} or run: clawget auth <api-key>"

LEGACY_TIPS = {
    "search": 'Use "clawget skills list --query <query>"',
    "buy": 'Use "clawget skills buy <slug>"',
    "list": 'Use "clawget purchases list"',
}


class CommandError(Exception):
    """A failure detected by the CLI itself (bad local input, file conflicts, declined prompts)."""

    def __init__(self, message: str, *, code: str = "ERROR", exit_code: int = EXIT_ERROR, hint: str | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.code = code
        self.exit_code = exit_code
        self.hint = hint


@dataclass
class Runtime:
    """Everything a command handler needs, resolved once per invocation."""

    out: OutputContext
    config: Config
    api_key: str | None
    base_url: str
    _client: Clawget | None = None

    @property
    def client(self) -> Clawget:
        if self._client is None:
            if not self.api_key:
                raise CommandError("No API key found.", code="AUTH_REQUIRED", hint=AUTH_HINT)
            self._client = Clawget(api_key=self.api_key, base_url=self.base_url)
        return self._client

    def close(self) -> None:
        if self._client is not None:
            self._client.close()
            self._client = None


def _resolve_runtime(args: argparse.Namespace, cfg: Config, out: OutputContext) -> Runtime:
    # CLI flag > environment > config file.
    api_key = getattr(args, "api_key", None) or os.getenv(API_KEY_ENV) or cfg.api_key
    base_url = getattr(args, "base_url", None) or os.getenv(BASE_URL_ENV) or cfg.base_url or DEFAULT_BASE_URL
    return Runtime(out=out, config=cfg, api_key=api_key, base_url=base_url)


def _date(value: Any) -> str:
    if not isinstance(value, str) or not value:
        return "N/A"
    return value[:10]


def _stars(rating: Any) -> str:
    try:
        n = int(round(float(rating)))
    except (TypeError, ValueError):
        return ""
    return "⭐" * max(0, min(n, 5))


def _tags(value: Any) -> str:
    if isinstance(value, list):
        return ", ".join(str(t) for t in value)
    return str(value or "")


def _truncate(text: Any, n: int) -> str:
    s = str(text or "")
    return s if len(s) <= n else s[:n] + "..."


def _slug_dir_name(slug: str) -> str:
    name = slug.strip()
    if not name or name in (".", "..") or "/" in name or "\\" in name:
        raise CommandError(f"Invalid skill slug for a directory name: {slug!r}")
    return name


# ---------------------------------------------------------------------------
# parser
# ---------------------------------------------------------------------------


def _add_output_flags(parser: argparse.ArgumentParser) -> None:
    parser.add_argument("--json", action="store_true", help="Output JSON (nothing else on stdout)")
    parser.add_argument("--no-color", action="store_true", help="Disable colored output (also: NO_COLOR=1)")
    parser.add_argument("--no-emoji", action="store_true", help="Disable emoji in human output")


def _add_runtime_overrides(parser: argparse.ArgumentParser) -> None:
    _add_output_flags(parser)
    parser.add_argument("--api-key", help=f"API key (overrides {API_KEY_ENV} and config)")
    parser.add_argument("--base-url", help=f"API base URL (overrides {BASE_URL_ENV} and config)")


def _add_yes(parser: argparse.ArgumentParser) -> None:
    parser.add_argument("-y", "--yes", action="store_true", help="Skip the confirmation prompt")


def build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(
        prog="clawget",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        description="Clawget CLI - browse, buy, and manage agent skills & SOULs.",
        epilog=textwrap.dedent(
            f"""\
            Environment variables:
              {API_KEY_ENV}, {BASE_URL_ENV}, CLAWGET_CONFIG_PATH, NO_COLOR

            Exit codes:
              0 ok, 1 error / auth missing, 2 usage, 3 network, 4 insufficient balance,
              5 not found, 6 local path conflict, 130 aborted
            """
        ),
    )
    p.add_argument("--version", action="version", version=f"clawget {__version__}")
    p.add_argument("-v", "--verbose", action="store_true", help="Log HTTP traffic to stderr")

    sub = p.add_subparsers(dest="cmd", required=True)

    # auth / register / config
    auth = sub.add_parser("auth", help="Save API key to the config file")
    auth.add_argument("key", help="API key")
    _add_output_flags(auth)

    register = sub.add_parser("register", help="Register a new agent and get API credentials")
    register.add_argument("--name", help="Agent name")
    register.add_argument("--platform", default="sdk", help="Platform (default: sdk)")
    register.add_argument("--save", action="store_true", help="Save the issued API key without asking")
    register.add_argument("--base-url", help=f"API base URL (overrides {BASE_URL_ENV} and config)")
    _add_output_flags(register)

    cfg = sub.add_parser("config", help="Manage local config")
    cfg_sub = cfg.add_subparsers(dest="subcmd", required=True)
    _add_output_flags(cfg_sub.add_parser("path", help="Print config path"))
    _add_output_flags(cfg_sub.add_parser("show", help="Show config (API key redacted)"))
    cfg_set = cfg_sub.add_parser("set", help="Set config fields and command defaults")
    cfg_set.add_argument("--base-url")
    cfg_set.add_argument("--search-limit", type=int, help="Default result count for skills list / search")
    cfg_set.add_argument("--search-category", help="Default category for skills list / search")
    cfg_set.add_argument("--install-dir", help="Default directory for skills install")
    _add_output_flags(cfg_set)

    # agent
    agent = sub.add_parser("agent", help="Agent identity and status commands")
    agent_sub = agent.add_subparsers(dest="subcmd", required=True)
    _add_runtime_overrides(agent_sub.add_parser("me", help="Get current agent info"))
    _add_runtime_overrides(agent_sub.add_parser("status", help="Check agent registration status"))
    _add_runtime_overrides(agent_sub.add_parser("profile", help="Show the agent profile"))
    agent_update = agent_sub.add_parser("update-profile", help="Update the agent profile")
    agent_update.add_argument("--name")
    agent_update.add_argument("--description")
    agent_update.add_argument("--avatar-url")
    _add_runtime_overrides(agent_update)

    # wallet
    wallet = sub.add_parser("wallet", help="Wallet and balance management")
    wallet_sub = wallet.add_subparsers(dest="subcmd", required=True)
    _add_runtime_overrides(wallet_sub.add_parser("balance", help="Show wallet balance"))
    _add_runtime_overrides(wallet_sub.add_parser("deposit-address", help="Get deposit address and instructions"))
    w_list = wallet_sub.add_parser("withdrawals", help="List withdrawal history")
    w_list.add_argument("--page", type=int)
    w_list.add_argument("--limit", type=int)
    _add_runtime_overrides(w_list)
    w_out = wallet_sub.add_parser("withdraw", help="Withdraw funds to an external address")
    w_out.add_argument("--amount", type=float, required=True)
    w_out.add_argument("--address", required=True, help="Destination address")
    w_out.add_argument("--network", help="Network (default: backend default)")
    _add_yes(w_out)
    _add_runtime_overrides(w_out)
    w_donate = wallet_sub.add_parser("donate", help="Donate to the Clawget project")
    w_donate.add_argument("--amount", type=float, required=True)
    w_donate.add_argument("--message")
    _add_yes(w_donate)
    _add_runtime_overrides(w_donate)
    _add_runtime_overrides(wallet_sub.add_parser("donations", help="Show donation statistics"))

    # skills
    skills = sub.add_parser("skills", help="Browse, buy, and manage skills")
    skills_sub = skills.add_subparsers(dest="subcmd", required=True)

    s_list = skills_sub.add_parser("list", help="List available skills")
    s_list.add_argument("--category")
    s_list.add_argument("--query")
    s_list.add_argument("--min-price", type=float)
    s_list.add_argument("--max-price", type=float)
    s_list.add_argument("--sort-by", choices=("price", "rating", "popular", "newest"))
    s_list.add_argument("--sort-order", choices=("asc", "desc"))
    s_list.add_argument("--limit", type=int, help="Number of results (default: 10 or config)")
    s_list.add_argument("--page", type=int, default=1)
    _add_runtime_overrides(s_list)

    s_get = skills_sub.add_parser("get", help="Get detailed information about a skill")
    s_get.add_argument("slug", help="Skill id or slug")
    _add_runtime_overrides(s_get)

    s_buy = skills_sub.add_parser("buy", help="Purchase a skill")
    s_buy.add_argument("slug", help="Skill id or slug")
    s_buy.add_argument("--auto-install", action="store_true", help="Automatically install after purchase")
    _add_yes(s_buy)
    _add_runtime_overrides(s_buy)

    s_create = skills_sub.add_parser("create", help="Create a new skill listing")
    s_create.add_argument("--name", required=True)
    s_create.add_argument("--description", required=True)
    s_create.add_argument("--price", type=float, required=True, help="Price in USD")
    s_create.add_argument("--category", default="automation", help="Category name or slug (default: automation)")
    s_create.add_argument("--category-id", help="Category id (skips the lookup)")
    s_create.add_argument("--short-desc")
    s_create.add_argument("--thumbnail-url")
    s_create.add_argument("--currency")
    _add_runtime_overrides(s_create)

    for name, help_text in (("featured", "List featured skills"), ("free", "List free skills")):
        sp = skills_sub.add_parser(name, help=help_text)
        sp.add_argument("--limit", type=int, default=10)
        _add_runtime_overrides(sp)

    s_download = skills_sub.add_parser("download", help="Show package URL and license for a purchased skill")
    s_download.add_argument("slug", help="Skill id or slug")
    _add_runtime_overrides(s_download)

    s_install = skills_sub.add_parser("install", help="Download a purchased skill into a local directory")
    s_install.add_argument("slug", help="Skill id or slug")
    s_install.add_argument("--dir", help=f"Skills directory (default: config or {DEFAULT_INSTALL_DIR})")
    _add_runtime_overrides(s_install)

    s_upload = skills_sub.add_parser("upload", help="Package a skill folder (with SKILL.md) and upload it")
    s_upload.add_argument("path", nargs="?", default=".", help="Skill folder (default: .)")
    s_upload.add_argument("--skill-id", help="Listing to attach the package to")
    s_upload.add_argument("--version", help="Package version")
    _add_runtime_overrides(s_upload)

    s_activate = skills_sub.add_parser("activate", help="Activate a license key on this device")
    s_activate.add_argument("license_key")
    s_activate.add_argument("--device-id", help="Device identifier (default: host name)")
    _add_runtime_overrides(s_activate)

    # souls
    souls = sub.add_parser("souls", help="Browse, buy, and create agent SOULs")
    souls_sub = souls.add_subparsers(dest="subcmd", required=True)

    so_list = souls_sub.add_parser("list", help="List available SOULs")
    so_list.add_argument("--category")
    so_list.add_argument("--tags", help="Comma-separated tags")
    so_list.add_argument("--query")
    so_list.add_argument("--limit", type=int, default=20)
    so_list.add_argument("--page", type=int)
    _add_runtime_overrides(so_list)

    so_get = souls_sub.add_parser("get", help="Get a SOUL by slug (includes full SOUL.md content)")
    so_get.add_argument("slug")
    so_get.add_argument("--save", metavar="PATH", help="Save the SOUL.md content to a new file")
    _add_runtime_overrides(so_get)

    so_buy = souls_sub.add_parser("buy", help="Purchase a SOUL")
    so_buy.add_argument("slug", help="SOUL id or slug")
    _add_yes(so_buy)
    _add_runtime_overrides(so_buy)

    so_create = souls_sub.add_parser("create", help="Create and list a new SOUL")
    so_create.add_argument("--name", required=True)
    so_create.add_argument("--description", required=True)
    so_create.add_argument("--content-file", required=True, help="Path to SOUL.md file")
    so_create.add_argument("--price", type=float, default=0.0, help="Price (default: 0 for free)")
    so_create.add_argument("--category")
    so_create.add_argument("--tags", help="Comma-separated tags")
    _add_runtime_overrides(so_create)

    # purchases / categories / reviews / licenses
    purchases = sub.add_parser("purchases", help="View purchase history")
    purchases_sub = purchases.add_subparsers(dest="subcmd", required=True)
    pu_list = purchases_sub.add_parser("list", help="List your purchased skills")
    pu_list.add_argument("--page", type=int, default=1)
    pu_list.add_argument("--limit", type=int, default=20)
    _add_runtime_overrides(pu_list)

    _add_runtime_overrides(sub.add_parser("categories", help="List all marketplace categories"))

    reviews = sub.add_parser("reviews", help="Read and write skill reviews")
    reviews_sub = reviews.add_subparsers(dest="subcmd", required=True)
    r_list = reviews_sub.add_parser("list", help="List reviews for a skill")
    r_list.add_argument("slug")
    r_list.add_argument("--page", type=int, default=1)
    r_list.add_argument("--limit", type=int, default=10)
    _add_runtime_overrides(r_list)
    r_create = reviews_sub.add_parser("create", help="Write a review for a purchased skill")
    r_create.add_argument("slug")
    r_create.add_argument("--rating", type=int, required=True, help="Rating (1-5)")
    r_create.add_argument("--body", required=True)
    r_create.add_argument("--title")
    _add_runtime_overrides(r_create)

    lv = sub.add_parser("license-validate", help="Validate a license key")
    lv.add_argument("key")
    _add_runtime_overrides(lv)

    # legacy aliases
    search = sub.add_parser("search", help="(legacy) Search skills; use: skills list --query")
    search.add_argument("query")
    search.add_argument("--category")
    search.add_argument("--limit", type=int)
    search.add_argument("--page", type=int, default=1)
    _add_runtime_overrides(search)

    buy = sub.add_parser("buy", help="(legacy) Purchase a skill; use: skills buy")
    buy.add_argument("slug")
    buy.add_argument("--auto-install", action="store_true")
    _add_yes(buy)
    _add_runtime_overrides(buy)

    legacy_list = sub.add_parser("list", help="(legacy) List purchases; use: purchases list")
    legacy_list.add_argument("--page", type=int, default=1)
    legacy_list.add_argument("--limit", type=int, default=20)
    _add_runtime_overrides(legacy_list)

    return p


def _subcommands(parser: argparse.ArgumentParser) -> dict[str, argparse.ArgumentParser]:
    for action in parser._actions:
        if isinstance(action, argparse._SubParsersAction):
            return dict(action.choices)
    return {}


def _find_unknown_command(parser: argparse.ArgumentParser, argv: list[str]) -> tuple[str, list[str]] | None:
    """Return (unknown token, known names at that level) for the first unrecognised command word."""
    idx = next((i for i, t in enumerate(argv) if not t.startswith("-")), None)
    if idx is None:
        return None
    commands = _subcommands(parser)
    word = argv[idx]
    if word not in commands:
        return word, sorted(commands)

    nested = _subcommands(commands[word])
    if nested and idx + 1 < len(argv) and not argv[idx + 1].startswith("-"):
        sub_word = argv[idx + 1]
        if sub_word not in nested:
            return f"{word} {sub_word}", [f"{word} {n}" for n in sorted(nested)]
    return None


def _report_unknown_command(out: OutputContext, word: str, known: list[str]) -> int:
    close = suggest(word, known)
    if out.json_mode:
        out.emit(
            {
                "error": True,
                "code": "UNKNOWN_COMMAND",
                "message": f"Unknown command: {word}",
                "status": None,
                "suggestions": close,
                "commands": known,
            }
        )
        return EXIT_ERROR
    hint = "Did you mean " + " or ".join(f"'{c}'" for c in close) + "?" if close else None
    out.error(code="UNKNOWN_COMMAND", message=f"Unknown command: {word}", hint=hint)
    out.err.print("Available commands: " + ", ".join(known))
    return EXIT_ERROR


# ---------------------------------------------------------------------------
# commands
# ---------------------------------------------------------------------------


def cmd_auth(args: argparse.Namespace, rt: Runtime) -> int:
    key = args.key.strip()
    if not key:
        raise CommandError("API key must not be empty.", hint="Copy the key printed by: clawget register")
    path = save_config(replace(load_config(), api_key=key))
    if rt.out.json_mode:
        rt.out.emit({"saved": True, "path": str(path)})
    else:
        rt.out.success(f"API key saved to {path}")
    return EXIT_OK


def cmd_register(args: argparse.Namespace, rt: Runtime) -> int:
    out = rt.out
    out.progress(f"{out.glyph('🤖')}Registering new agent...")
    result = Clawget.register(name=args.name, platform=args.platform, base_url=rt.base_url)

    if out.json_mode:
        out.emit(result)
    else:
        out.line()
        out.success("Agent registered successfully!")
        out.line("─" * 33, style="dim")
        out.field("Agent ID", result.get("agentId"))
        out.field("API Key", result.get("apiKey"), style="bold")
        out.field("Deposit Address", result.get("depositAddress"))
        out.field("Chain", result.get("chain"))
        out.field("Currency", result.get("currency"))
        out.line()
        out.warn("Save your API key - it will only be shown once!")
        out.line()
        out.line(f"{out.glyph('💡')}Next steps:")
        out.line(f"   1. Save API key: clawget auth {result.get('apiKey')}")
        out.line(f"   2. Fund wallet: Send {result.get('currency')} to {result.get('depositAddress')}")
        out.line("   3. Start buying skills!")

    save = args.save or (not out.json_mode and out.confirm(f"\n{out.glyph('💾')}Save API key now?"))
    if save and result.get("apiKey"):
        path = save_config(replace(load_config(), api_key=result["apiKey"]))
        out.progress(f"API key saved to {path}")
    return EXIT_OK


def cmd_config(args: argparse.Namespace, rt: Runtime) -> int:
    out = rt.out
    if args.subcmd == "path":
        path = str(config_path())
        if out.json_mode:
            out.emit({"path": path})
        else:
            out.line(path)
        return EXIT_OK

    if args.subcmd == "show":
        d = load_config().to_dict()
        if "apiKey" in d:
            d["apiKey"] = redact_token(d["apiKey"])
        if out.json_mode:
            out.emit(d)
        else:
            out.line(json.dumps(d, indent=2, sort_keys=True))
        return EXIT_OK

    if args.subcmd == "set":
        cfg = load_config()
        defaults = {k: dict(v) for k, v in cfg.defaults.items()}
        if args.search_limit is not None:
            if args.search_limit <= 0:
                raise CommandError("--search-limit must be positive.")
            defaults.setdefault("search", {})["limit"] = args.search_limit
        if args.search_category is not None:
            defaults.setdefault("search", {})["category"] = args.search_category
        if args.install_dir is not None:
            defaults.setdefault("install", {})["dir"] = args.install_dir
        base_url = args.base_url if args.base_url is not None else cfg.base_url
        path = save_config(replace(cfg, base_url=base_url or None, defaults=defaults))
        if out.json_mode:
            out.emit({"saved": True, "path": str(path)})
        else:
            out.success(f"Saved: {path}")
        return EXIT_OK

    raise AssertionError("unreachable")


def cmd_agent(args: argparse.Namespace, rt: Runtime) -> int:
    out = rt.out
    if args.subcmd == "me":
        info = rt.client.agent.me()
        if out.json_mode:
            out.emit(info)
            return EXIT_OK
        out.title("Agent Info", glyph="🤖")
        out.field("ID", info.get("id"))
        out.field("Agent ID", info.get("agentId"))
        out.field("Name", info.get("name"))
        out.field("Status", info.get("status"))
        out.field("Claimed", "Yes" if info.get("claimed") else "No")
        out.field("Permissions", _tags(info.get("permissions")))
        wallet = info.get("wallet")
        if isinstance(wallet, dict):
            out.line()
            out.line(f"{out.glyph('💰')}Wallet:")
            out.field("Balance", wallet.get("balance"), indent=3)
            out.field("Deposit", wallet.get("depositAddress"), indent=3)
        out.line()
        out.field("Created", _date(info.get("createdAt")))
        return EXIT_OK

    if args.subcmd == "status":
        status = rt.client.agent.status()
        if out.json_mode:
            out.emit(status)
            return EXIT_OK

        def yes_no(v: Any) -> str:
            return f"{out.glyph('✅')}Yes" if v else f"{out.glyph('❌')}No"

        out.title("Agent Status", glyph="📊")
        out.field("Registered", yes_no(status.get("registered")))
        out.field("Claimed", yes_no(status.get("claimed")))
        out.field("Has Balance", yes_no(status.get("hasBalance")))
        return EXIT_OK

    if args.subcmd in ("profile", "update-profile"):
        if args.subcmd == "profile":
            profile = rt.client.agent.get_profile()
        else:
            fields = {"name": args.name, "description": args.description, "avatarUrl": args.avatar_url}
            if all(v is None for v in fields.values()):
                raise CommandError("Nothing to update.", hint="Pass --name, --description or --avatar-url")
            profile = rt.client.agent.update_profile(**fields)
        if out.json_mode:
            out.emit(profile)
            return EXIT_OK
        out.title("Agent Profile", glyph="🤖")
        for key, value in profile.items() if isinstance(profile, dict) else ():
            if not isinstance(value, (dict, list)):
                out.field(key, value)
        return EXIT_OK

    raise AssertionError("unreachable")


def cmd_wallet(args: argparse.Namespace, rt: Runtime) -> int:
    out = rt.out
    if args.subcmd == "balance":
        balance = rt.client.wallet.balance()
        if out.json_mode:
            out.emit(balance)
            return EXIT_OK
        cur = balance.get("currency", "")
        out.title("Wallet Balance", glyph="💰")
        out.field("Balance", f"{balance.get('balance')} {cur}")
        for key, label in (("availableBalance", "Available"), ("pendingBalance", "Pending"), ("lockedBalance", "Locked")):
            if balance.get(key) is not None:
                out.field(label, f"{balance[key]} {cur}")
        if balance.get("totalEarned") is not None:
            out.line()
            out.field("Total Earned", f"{balance['totalEarned']} {cur}")
        if balance.get("totalSpent") is not None:
            out.field("Total Spent", f"{balance['totalSpent']} {cur}")
        return EXIT_OK

    if args.subcmd == "deposit-address":
        deposit = rt.client.wallet.deposit()
        if out.json_mode:
            out.emit(deposit)
            return EXIT_OK
        out.title("Deposit Information", glyph="💳")
        out.field("Address", deposit.get("address"))
        out.field("Chain", deposit.get("chain"))
        out.field("Currency", deposit.get("currency"))
        if deposit.get("balance"):
            out.field("Current Balance", deposit["balance"])
        if deposit.get("qrCode"):
            out.line()
            out.field("QR Code", deposit["qrCode"])
        out.line()
        out.warn("Important:")
        out.line(f"   • Send only {deposit.get('currency')} to this address")
        out.line(f"   • Use {deposit.get('chain')} network")
        out.line("   • Funds may take a few minutes to appear")
        return EXIT_OK

    if args.subcmd == "withdrawals":
        result = rt.client.wallet.withdrawals(page=args.page, limit=args.limit)
        if out.json_mode:
            out.emit(result)
            return EXIT_OK
        out.title("Withdrawal History", glyph="💸")
        items = result.get("withdrawals", [])
        if not items:
            out.line("No withdrawals yet")
            return EXIT_OK
        for i, w in enumerate(items, 1):
            cur = w.get("currency", "")
            out.line()
            out.line(f"{i}. {w.get('amount')} {cur}", style="bold")
            out.field("Status", w.get("status"), indent=3)
            out.field("Fee", f"{w.get('fee')} {cur}", indent=3)
            out.field("To", w.get("destinationAddress"), indent=3)
            if w.get("network"):
                out.field("Network", w["network"], indent=3)
            if w.get("txHash"):
                out.field("TX", w["txHash"], indent=3)
            out.field("Date", _date(w.get("createdAt")), indent=3)
        pagination = result.get("pagination")
        if isinstance(pagination, dict):
            out.line()
            out.line(f"{out.glyph('📊')}Page {pagination.get('page')} of {pagination.get('totalPages')}")
        return EXIT_OK

    if args.subcmd == "withdraw":
        if args.amount <= 0:
            raise CommandError("--amount must be positive.")
        _confirm(rt, f"Withdraw {args.amount} to {args.address}?", args.yes)
        out.progress(f"{out.glyph('💸')}Requesting withdrawal...")
        result = rt.client.wallet.withdraw(amount=args.amount, address=args.address, network=args.network)
        if out.json_mode:
            out.emit(result)
            return EXIT_OK
        out.success("Withdrawal requested!")
        out.field("ID", result.get("id"))
        out.field("Status", result.get("status"))
        if result.get("fee") is not None:
            out.field("Fee", result.get("fee"))
        return EXIT_OK

    if args.subcmd == "donate":
        if args.amount <= 0:
            raise CommandError("--amount must be positive.")
        _confirm(rt, f"Donate {args.amount}?", args.yes)
        result = rt.client.wallet.donate(amount=args.amount, message=args.message)
        if out.json_mode:
            out.emit(result)
            return EXIT_OK
        out.success("Thank you for your donation!")
        for key in ("id", "amount", "currency", "status"):
            if result.get(key) is not None:
                out.field(key.capitalize(), result[key])
        return EXIT_OK

    if args.subcmd == "donations":
        stats = rt.client.wallet.donation_stats()
        if out.json_mode:
            out.emit(stats)
            return EXIT_OK
        out.title("Donations", glyph="🎁")
        for key, value in stats.items() if isinstance(stats, dict) else ():
            if not isinstance(value, (dict, list)):
                out.field(key, value)
        return EXIT_OK

    raise AssertionError("unreachable")


def _confirm(rt: Runtime, question: str, assume_yes: bool) -> None:
    # A missing API key fails before the user is asked anything.
    rt.client
    if not rt.out.confirm(question, assume_yes=assume_yes):
        raise CommandError("Cancelled.", code="ABORTED", exit_code=EXIT_ABORTED)


def _print_skill_rows(rt: Runtime, skills: list[dict[str, Any]], *, brief: bool = False) -> None:
    out = rt.out
    for i, skill in enumerate(skills, 1):
        out.line()
        out.line(f"{i}. {skill.get('title')}", style="bold")
        out.field("Slug", skill.get("slug"), indent=3)
        out.field("Price", f"{skill.get('price')} {skill.get('currency', '')}".strip(), indent=3)
        out.field("Category", skill.get("categoryName") or skill.get("category"), indent=3)
        if not brief:
            out.field("Creator", skill.get("creator"), indent=3)
        rating = skill.get("rating")
        stars = _stars(rating) if out.emoji else ""
        out.field("Rating", f"{stars} ({rating})".strip() if rating is not None else None, indent=3)
        if not brief:
            out.field("Description", _truncate(skill.get("description"), 80), indent=3)


def _run_skills_list(args: argparse.Namespace, rt: Runtime, *, query: str | None, heading: str) -> int:
    out = rt.out
    cfg = rt.config
    limit = args.limit or cfg.default("search", "limit") or 10
    category = args.category or cfg.default("search", "category")
    response = rt.client.skills.list(
        category=category,
        query=query,
        min_price=getattr(args, "min_price", None),
        max_price=getattr(args, "max_price", None),
        sort_by=getattr(args, "sort_by", None),
        sort_order=getattr(args, "sort_order", None),
        limit=int(limit),
        page=args.page,
    )
    if out.json_mode:
        out.emit(response)
        return EXIT_OK

    out.title(heading, glyph="🔍" if query else "🔧")
    skills = response["skills"]
    pagination = response["pagination"]
    if not skills:
        out.line("No skills found")
        return EXIT_OK
    _print_skill_rows(rt, skills, brief=args.cmd == "search")
    out.line()
    out.line(f"{out.glyph('📊')}Showing {len(skills)} of {pagination['total']} results")
    if pagination["hasMore"]:
        out.line(f"   Next: clawget skills list --page {pagination['page'] + 1}")
    return EXIT_OK


def _run_skills_buy(args: argparse.Namespace, rt: Runtime) -> int:
    out = rt.out
    _confirm(rt, f"Purchase skill {args.slug}?", args.yes)
    out.progress(f"{out.glyph('💳')}Purchasing skill {args.slug}...")
    result = rt.client.skills.buy(args.slug, auto_install=args.auto_install)
    if out.json_mode:
        out.emit(result)
        return EXIT_OK
    out.success("Purchase successful!")
    out.field("Purchase ID", result.get("purchaseId"))
    out.field("License Key", result.get("licenseKey"))
    out.field("Status", result.get("status"))
    if result.get("message"):
        out.field("Message", result["message"])
    if result.get("installedPath"):
        out.field("Installed to", result["installedPath"])
    return EXIT_OK


def _run_purchases_list(args: argparse.Namespace, rt: Runtime) -> int:
    out = rt.out
    response = rt.client.purchases.list(page=args.page, limit=args.limit)
    if out.json_mode:
        out.emit(response)
        return EXIT_OK
    out.title("Your Purchased Skills", glyph="📚")
    purchases = response["purchases"]
    if not purchases:
        out.line("No purchases yet")
        return EXIT_OK
    for i, p in enumerate(purchases, 1):
        skill = p.get("skill") if isinstance(p.get("skill"), dict) else {}
        out.line()
        out.line(f"{i}. {skill.get('name')}", style="bold")
        out.field("Slug", skill.get("slug"), indent=3)
        out.field("Price", f"{p.get('amount')} {p.get('currency', '')}".strip(), indent=3)
        out.field("Status", p.get("status"), indent=3)
        out.field("Purchased", _date(p.get("purchasedAt")), indent=3)
        if p.get("licenseKey"):
            out.field("License", p["licenseKey"], indent=3)
    pagination = response["pagination"]
    out.line()
    out.line(f"{out.glyph('📊')}Showing {len(purchases)} of {pagination['total']} purchases")
    if pagination["hasMore"]:
        out.line(f"   Next: clawget purchases list --page {pagination['page'] + 1}")
    return EXIT_OK


def cmd_skills(args: argparse.Namespace, rt: Runtime) -> int:
    out = rt.out
    if args.subcmd == "list":
        return _run_skills_list(args, rt, query=args.query, heading="Available Skills")

    if args.subcmd == "get":
        skill = rt.client.skills.get(args.slug)
        if out.json_mode:
            out.emit(skill)
            return EXIT_OK
        title = str(skill.get("title") or args.slug)
        out.title(title, glyph="📦", rule="═")
        out.line()
        out.line(str(skill.get("description") or ""))
        out.line()
        out.field(f"{out.glyph('💰')}Price", f"{skill.get('price')} {skill.get('currency', '')}".strip())
        out.field(f"{out.glyph('📁')}Category", skill.get("categoryName") or skill.get("category"))
        out.field(f"{out.glyph('👤')}Creator", skill.get("creator"))
        out.field(f"{out.glyph('⭐')}Rating", f"{skill.get('rating')} ({skill.get('reviews', 0)} reviews)")
        out.field(f"{out.glyph('📥')}Downloads", skill.get("downloads"))
        out.field(f"{out.glyph('🏷️')}Tags", _tags(skill.get("tags")))
        version = skill.get("currentVersion")
        if isinstance(version, dict) and version.get("version"):
            out.field(f"{out.glyph('🔖')}Version", version["version"])
        if skill.get("featured"):
            out.line(f"{out.glyph('🌟')}Featured")
        if skill.get("staffPick"):
            out.line(f"{out.glyph('👍')}Staff Pick")
        out.line()
        out.line(f"{out.glyph('🔗')}{SITE_URL}/skills/{skill.get('slug') or args.slug}")
        return EXIT_OK

    if args.subcmd == "buy":
        return _run_skills_buy(args, rt)

    if args.subcmd == "create":
        out.progress(f"{out.glyph('📤')}Creating skill: {args.name}...")
        result = rt.client.skills.create(
            name=args.name,
            description=args.description,
            price=args.price,
            category_id=args.category_id,
            category=args.category,
            short_desc=args.short_desc,
            thumbnail_url=args.thumbnail_url,
            currency=args.currency,
        )
        if out.json_mode:
            out.emit(result)
            return EXIT_OK
        out.success("Skill created successfully!")
        out.field("ID", result.get("id"))
        out.field("Slug", result.get("slug"))
        out.field("Title", result.get("title"))
        out.field("Price", f"{result.get('price')} {result.get('currency', '')}".strip())
        out.field("Status", result.get("status"))
        out.line()
        out.line(f"{out.glyph('🌐')}View at: {SITE_URL}/skills/{result.get('slug')}")
        return EXIT_OK

    if args.subcmd in ("featured", "free"):
        fetch: Callable[[int], list[Any]] = getattr(rt.client.skills, args.subcmd)
        skills = fetch(args.limit)
        if out.json_mode:
            out.emit(skills)
            return EXIT_OK
        out.title("Featured Skills" if args.subcmd == "featured" else "Free Skills", glyph="🌟")
        if not skills:
            out.line("No skills found")
            return EXIT_OK
        _print_skill_rows(rt, skills, brief=True)
        return EXIT_OK

    if args.subcmd == "download":
        info = rt.client.skills.download(args.slug)
        if out.json_mode:
            out.emit(info)
            return EXIT_OK
        out.title(f"Download: {args.slug}", glyph="📥")
        out.field("Package URL", info.get("packageUrl"))
        out.field("License Key", info.get("licenseKey"))
        if info.get("maxActivations") is not None:
            out.field("Activations", f"{info.get('activations', 0)}/{info.get('maxActivations')}")
        return EXIT_OK

    if args.subcmd == "install":
        return _install_skill(args, rt)

    if args.subcmd == "upload":
        root = Path(args.path).expanduser()
        if not root.exists():
            raise CommandError(f"Path does not exist: {root}", code="NOT_FOUND", exit_code=EXIT_NOT_FOUND)
        pkg = package_skill(root)
        for w in pkg.warnings:
            out.err.print(f"warning: {w}", style="yellow")
        out.progress(f"{out.glyph('📤')}Uploading {pkg.filename} ({pkg.size_bytes} bytes, {pkg.file_count} files)...")
        result = rt.client.skills.upload_package(
            pkg.zip_bytes,
            filename=pkg.filename,
            fields={"skillId": args.skill_id, "version": args.version, "sha256": pkg.sha256},
        )
        if out.json_mode:
            out.emit(result)
            return EXIT_OK
        out.success("Package uploaded!")
        out.field("SHA256", pkg.sha256)
        for key in ("packageUrl", "url", "version"):
            if result.get(key):
                out.field(key, result[key])
        return EXIT_OK

    if args.subcmd == "activate":
        device_id = args.device_id or platform.node() or "unknown-device"
        device_info = {"hostname": platform.node(), "platform": sys.platform, "client": f"clawget-cli/{__version__}"}
        result = rt.client.skills.activate(args.license_key, device_id=device_id, device_info=device_info)
        if out.json_mode:
            out.emit(result)
            return EXIT_OK
        out.success("License activated!")
        out.field("Device", device_id)
        if result.get("maxActivations") is not None:
            out.field("Activations", f"{result.get('activations', 0)}/{result.get('maxActivations')}")
        if result.get("message"):
            out.field("Message", result["message"])
        return EXIT_OK

    raise AssertionError("unreachable")


def _install_skill(args: argparse.Namespace, rt: Runtime) -> int:
    out = rt.out
    skills_dir = Path(args.dir or rt.config.default("install", "dir") or DEFAULT_INSTALL_DIR).expanduser()
    target = skills_dir / _slug_dir_name(args.slug)
    if target.exists():
        raise CommandError(
            f"Install target already exists: {target}",
            code="CONFLICT",
            exit_code=EXIT_CONFLICT,
            hint="Remove the directory or pass a different --dir",
        )

    info = rt.client.skills.download(args.slug)
    url = info.get("packageUrl")
    if not url:
        raise CommandError(f"No package URL returned for {args.slug}.", hint=f"Check the purchase: clawget skills download {args.slug}")
    out.progress(f"{out.glyph('📥')}Downloading {args.slug}...")
    data = rt.client.download_bytes(url)
    try:
        install_package(data, target)
    except FileExistsError as e:
        raise CommandError(f"Install target already exists: {target}", code="CONFLICT", exit_code=EXIT_CONFLICT) from e

    result = {"slug": args.slug, "path": str(target), "licenseKey": info.get("licenseKey")}
    if out.json_mode:
        out.emit(result)
    else:
        out.success(f"Installed {args.slug} to {target}")
        if info.get("licenseKey"):
            out.field("License Key", info["licenseKey"])
    return EXIT_OK


def cmd_souls(args: argparse.Namespace, rt: Runtime) -> int:
    out = rt.out
    if args.subcmd == "list":
        response = rt.client.souls.list(
            category=args.category, tags=args.tags, query=args.query, limit=args.limit, page=args.page
        )
        if out.json_mode:
            out.emit(response)
            return EXIT_OK
        out.title("Available SOULs", glyph="🧠")
        souls = response["souls"]
        if not souls:
            out.line("No SOULs found")
            return EXIT_OK
        for i, soul in enumerate(souls, 1):
            out.line()
            out.line(f"{i}. {soul.get('name')}", style="bold")
            out.field("Slug", soul.get("slug"), indent=3)
            out.field("Price", soul.get("price"), indent=3)
            out.field("Author", soul.get("author"), indent=3)
            out.field("Downloads", soul.get("downloads"), indent=3)
            if soul.get("category"):
                out.field("Category", soul["category"], indent=3)
            if soul.get("tags"):
                out.field("Tags", _tags(soul["tags"]), indent=3)
            out.line(f"   {soul.get('description') or ''}")
        out.line()
        out.line(f"{out.glyph('📊')}Showing {len(souls)} of {response['pagination']['total']} SOULs")
        return EXIT_OK

    if args.subcmd == "get":
        if args.save and Path(args.save).expanduser().exists():
            raise CommandError(
                f"File already exists: {args.save}",
                code="CONFLICT",
                exit_code=EXIT_CONFLICT,
                hint="Choose another --save path",
            )
        soul = rt.client.souls.get(args.slug)
        content = soul.get("content")
        if args.save:
            if not content:
                raise CommandError(f"SOUL {args.slug} has no content to save.")
            Path(args.save).expanduser().write_text(content, encoding="utf-8")
            out.progress(f"{out.glyph('✅')}SOUL.md saved to {args.save}")
        if out.json_mode:
            out.emit(soul)
            return EXIT_OK
        name = str(soul.get("name") or args.slug)
        out.title(name, glyph="🧠", rule="═")
        out.line()
        out.line(str(soul.get("description") or ""))
        out.line()
        out.field(f"{out.glyph('💰')}Price", soul.get("price"))
        out.field(f"{out.glyph('👤')}Author", soul.get("author"))
        out.field(f"{out.glyph('📥')}Downloads", soul.get("downloads"))
        if soul.get("category"):
            out.field(f"{out.glyph('📁')}Category", soul["category"])
        if soul.get("tags"):
            out.field(f"{out.glyph('🏷️')}Tags", _tags(soul["tags"]))
        if content and not args.save:
            out.line()
            out.line(f"{out.glyph('📄')}SOUL Content:")
            out.line("─" * 50, style="dim")
            out.line(content[:500])
            if len(content) > 500:
                out.line()
                out.line("... (truncated)")
                out.line(f"{out.glyph('💡')}Use --save SOUL.md to save the full content")
        out.line()
        out.line(f"{out.glyph('🔗')}{SITE_URL}/souls/{soul.get('slug') or args.slug}")
        return EXIT_OK

    if args.subcmd == "buy":
        _confirm(rt, f"Purchase SOUL {args.slug}?", args.yes)
        out.progress(f"{out.glyph('💳')}Purchasing SOUL {args.slug}...")
        result = rt.client.souls.buy(args.slug)
        if out.json_mode:
            out.emit(result)
            return EXIT_OK
        out.success("Purchase successful!")
        for key, label in (("purchaseId", "Purchase ID"), ("status", "Status"), ("message", "Message")):
            if result.get(key):
                out.field(label, result[key])
        return EXIT_OK

    if args.subcmd == "create":
        path = Path(args.content_file).expanduser()
        if not path.is_file():
            raise CommandError(
                f"File not found: {args.content_file}",
                code="NOT_FOUND",
                exit_code=EXIT_NOT_FOUND,
                hint="Pass the path of an existing SOUL.md with --content-file",
            )
        content = path.read_text(encoding="utf-8")
        tags = [t.strip() for t in args.tags.split(",") if t.strip()] if args.tags else []
        out.progress(f"{out.glyph('🧠')}Creating SOUL: {args.name}...")
        result = rt.client.souls.create(
            name=args.name,
            description=args.description,
            content=content,
            price=args.price,
            category=args.category,
            tags=tags,
        )
        if out.json_mode:
            out.emit(result)
            return EXIT_OK
        out.success("SOUL created successfully!")
        out.field("ID", result.get("id"))
        out.field("Slug", result.get("slug"))
        out.field("Name", result.get("name"))
        out.field("Price", result.get("price"))
        out.field("Author", result.get("author"))
        if result.get("category"):
            out.field("Category", result["category"])
        if result.get("tags"):
            out.field("Tags", _tags(result["tags"]))
        out.line()
        out.line(f"{out.glyph('🌐')}View at: {SITE_URL}/souls/{result.get('slug')}")
        return EXIT_OK

    raise AssertionError("unreachable")


def cmd_purchases(args: argparse.Namespace, rt: Runtime) -> int:
    return _run_purchases_list(args, rt)


def cmd_categories(args: argparse.Namespace, rt: Runtime) -> int:
    out = rt.out
    response = rt.client.categories.list()
    if out.json_mode:
        out.emit(response)
        return EXIT_OK
    out.title("Marketplace Categories", glyph="📁")
    categories = response["categories"]
    if not categories:
        out.line("No categories found")
        return EXIT_OK
    for i, cat in enumerate(categories, 1):
        out.line()
        out.line(f"{i}. {cat.get('name')} ({cat.get('slug')})", style="bold")
        if cat.get("description"):
            out.line(f"   {cat['description']}")
        if cat.get("listingCount") is not None:
            out.line(f"   {cat['listingCount']} listings")
    out.line()
    out.line(f"{out.glyph('📊')}Total: {len(categories)} categories")
    return EXIT_OK


def cmd_reviews(args: argparse.Namespace, rt: Runtime) -> int:
    out = rt.out
    if args.subcmd == "list":
        response = rt.client.reviews.list(args.slug, page=args.page, limit=args.limit)
        if out.json_mode:
            out.emit(response)
            return EXIT_OK
        stats = response.get("stats") if isinstance(response.get("stats"), dict) else {}
        out.title(f"Reviews for {args.slug}", glyph="⭐")
        avg = stats.get("avgRating")
        avg_s = f"{float(avg):.1f}" if isinstance(avg, (int, float)) else "N/A"
        out.line(f"Average Rating: {avg_s} ({stats.get('totalReviews', 0)} reviews)")
        reviews = response.get("reviews") or []
        if not reviews:
            out.line()
            out.line("No reviews yet")
            return EXIT_OK
        for i, review in enumerate(reviews, 1):
            rating = review.get("rating")
            stars = _stars(rating) + " " if out.emoji else ""
            user = review.get("user") if isinstance(review.get("user"), dict) else {}
            out.line()
            out.line(f"{i}. {stars}({rating}/5)", style="bold")
            if review.get("title"):
                out.line(f'   "{review["title"]}"')
            out.line(f"   {review.get('body') or ''}")
            out.line(f"   - {user.get('displayName', 'anonymous')} • {_date(review.get('createdAt'))}")
            out.line(f"   {out.glyph('👍')}{review.get('helpful', 0)} helpful")
        pagination = response.get("pagination") if isinstance(response.get("pagination"), dict) else {}
        limit = pagination.get("limit") or args.limit
        total = pagination.get("total") or 0
        pages = -(-int(total) // int(limit)) if limit else 0
        out.line()
        out.line(f"{out.glyph('📊')}Page {pagination.get('page', args.page)} of {pages}")
        return EXIT_OK

    if args.subcmd == "create":
        if not 1 <= args.rating <= 5:
            raise CommandError("Rating must be between 1 and 5.", code="INVALID_ARGUMENT", hint="Pass --rating 1..5")
        out.progress(f"{out.glyph('📝')}Posting review for {args.slug}...")
        result = rt.client.reviews.create(skill_id=args.slug, rating=args.rating, body=args.body, title=args.title)
        if out.json_mode:
            out.emit(result)
            return EXIT_OK
        out.success("Review posted successfully!")
        out.field("Rating", _stars(args.rating) if out.emoji else f"{args.rating}/5")
        if result.get("title"):
            out.field("Title", result["title"])
        out.field("Body", result.get("body"))
        return EXIT_OK

    raise AssertionError("unreachable")


def cmd_license_validate(args: argparse.Namespace, rt: Runtime) -> int:
    out = rt.out
    result = rt.client.licenses.validate(args.key)
    if out.json_mode:
        out.emit(result)
        return EXIT_OK
    lic = result.get("license")
    if result.get("valid") and isinstance(lic, dict):
        out.title("License Valid", glyph="✅")
        out.field("Key", lic.get("key"))
        out.field("Type", lic.get("type"))
        out.field("Status", lic.get("status"))
        skill = lic.get("skill") if isinstance(lic.get("skill"), dict) else {}
        out.field("Skill", skill.get("name"))
        if lic.get("expiresAt"):
            out.field("Expires", _date(lic["expiresAt"]))
    else:
        out.line(f"{out.glyph('❌')}License Invalid", style="bold red")
        if result.get("error"):
            out.field("Error", result["error"])
    return EXIT_OK


def cmd_legacy(args: argparse.Namespace, rt: Runtime) -> int:
    rt.out.tip(LEGACY_TIPS[args.cmd])
    if args.cmd == "search":
        return _run_skills_list(args, rt, query=args.query, heading=f'Search results for "{args.query}":')
    if args.cmd == "buy":
        return _run_skills_buy(args, rt)
    if args.cmd == "list":
        return _run_purchases_list(args, rt)
    raise AssertionError("unreachable")


COMMANDS: dict[str, Callable[[argparse.Namespace, Runtime], int]] = {
    "auth": cmd_auth,
    "register": cmd_register,
    "config": cmd_config,
    "agent": cmd_agent,
    "wallet": cmd_wallet,
    "skills": cmd_skills,
    "souls": cmd_souls,
    "purchases": cmd_purchases,
    "categories": cmd_categories,
    "reviews": cmd_reviews,
    "license-validate": cmd_license_validate,
    "search": cmd_legacy,
    "buy": cmd_legacy,
    "list": cmd_legacy,
}


# ---------------------------------------------------------------------------
# errors / entry point
# ---------------------------------------------------------------------------


def _classify(err: ClawgetError) -> tuple[str, int, str | None]:
    if isinstance(err, TransportError):
        return "NETWORK_ERROR", EXIT_NETWORK, "Check your connection or the --base-url setting"
    if err.is_insufficient_balance:
        return "INSUFFICIENT_BALANCE", EXIT_INSUFFICIENT_BALANCE, "Fund your wallet: clawget wallet deposit-address"
    if err.is_not_found:
        return "NOT_FOUND", EXIT_NOT_FOUND, None
    if err.status_code in (401, 403):
        return "UNAUTHORIZED", EXIT_ERROR, AUTH_HINT
    if err.status_code is None:
        return "ERROR", EXIT_ERROR, None
    return "API_ERROR", EXIT_ERROR, None


def _configure_logging(verbose: bool) -> None:
    if not verbose:
        return
    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(logging.Formatter("%(asctime)s %(levelname)s %(name)s: %(message)s"))
    root = logging.getLogger("clawget")
    root.addHandler(handler)
    root.setLevel(logging.DEBUG)


def main(argv: list[str] | None = None) -> int:
    argv = list(sys.argv[1:] if argv is None else argv)
    parser = build_parser()
    early = OutputContext.create(json_mode="--json" in argv, no_color="--no-color" in argv, no_emoji="--no-emoji" in argv)

    unknown = _find_unknown_command(parser, argv)
    if unknown is not None:
        return _report_unknown_command(early, *unknown)

    try:
        args = parser.parse_args(argv)
    except SystemExit as e:
        code = e.code if isinstance(e.code, int) else EXIT_ERROR
        if code != EXIT_OK and early.json_mode:
            early.emit({"error": True, "code": "USAGE_ERROR", "message": "Invalid arguments", "status": None})
        return code

    _configure_logging(args.verbose)
    out = OutputContext.create(
        json_mode=getattr(args, "json", False),
        no_color=getattr(args, "no_color", False),
        no_emoji=getattr(args, "no_emoji", False),
    )
    rt = _resolve_runtime(args, load_config(), out)
    try:
        return COMMANDS[args.cmd](args, rt)
    except CommandError as e:
        out.error(code=e.code, message=e.message, hint=e.hint)
        return e.exit_code
    except ClawgetError as e:
        code, exit_code, hint = _classify(e)
        out.error(code=code, message=e.message, status=e.status_code, hint=hint)
        return exit_code
    except SkillPackageError as e:
        out.error(code="PACKAGE_ERROR", message=str(e))
        return EXIT_ERROR
    except OSError as e:
        out.error(code="LOCAL_ERROR", message=str(e))
        return EXIT_ERROR
    finally:
        rt.close()


if __name__ == "__main__":  # pragma: no cover
    raise SystemExit(main())
