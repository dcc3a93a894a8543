"""Runtime settings for the AR sync service.

Built once at process start (`SyncSettings.from_env()`) and passed explicitly to
every component. Nothing below the entrypoints reads `os.environ` for credentials.
"""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from enum import Enum
from typing import Mapping

from dotenv import load_dotenv

from src.arsync.errors import AuthConfigError


class NameMatchPolicy(str, Enum):
    """How the matcher falls back to names when no company carries the NetSuite id."""

    EXACT = "exact"
    FIRST_TOKEN = "first_token"


class UnmatchedPolicy(str, Enum):
    """What the reconciler does with a NetSuite customer that has no HubSpot company."""

    CREATE = "create"
    SKIP = "skip"


_TRUTHY = {"1", "true", "yes", "on"}


def _env_flag(env: Mapping[str, str], name: str, default: bool = False) -> bool:
    raw = env.get(name)
    if raw is None or raw.strip() == "":
        return default
    return raw.strip().lower() in _TRUTHY


def _env_float(
    env: Mapping[str, str], name: str, default: float, *, allow_zero: bool = True
) -> float:
    raw = env.get(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        value = float(raw)
    except ValueError:
        raise AuthConfigError(f"{name} must be a number, got {raw!r}")
    if value < 0 or (value == 0 and not allow_zero):
        bound = ">= 0" if allow_zero else "> 0"
        raise AuthConfigError(f"{name} must be {bound}, got {raw!r}")
    return value


def _env_enum(env: Mapping[str, str], name: str, enum_cls, default):
    raw = (env.get(name) or "").strip().lower()
    if not raw:
        return default
    try:
        return enum_cls(raw)
    except ValueError:
        allowed = ", ".join(m.value for m in enum_cls)
        raise AuthConfigError(f"{name} must be one of: {allowed} (got {raw!r})")


@dataclass(frozen=True, slots=True)
class NetSuiteCredentials:
    account_id: str
    consumer_key: str
    consumer_secret: str = field(repr=False)
    token_id: str
    token_secret: str = field(repr=False)

    @property
    def host_account(self) -> str:
        """Account id as used in the hostname (sandbox `_SB1` -> `-sb1`)."""

        return self.account_id.replace("_", "-").lower()

    @property
    def realm(self) -> str:
        return self.account_id.upper()


@dataclass(frozen=True, slots=True)
class SyncSettings:
    netsuite: NetSuiteCredentials
    hubspot_access_token: str = field(repr=False)
    name_match_policy: NameMatchPolicy = NameMatchPolicy.EXACT
    unmatched_policy: UnmatchedPolicy = UnmatchedPolicy.CREATE
    pacing_seconds: float = 0.1
    http_timeout_seconds: float = 30.0
    netsuite_rest_fallback: bool = False
    sync_on_start: bool = False
    log_level: str = "INFO"

    @classmethod
    def from_env(cls, env: Mapping[str, str] | None = None) -> "SyncSettings":
        """Build settings from the environment (after loading `.env`).

        All six credentials are required; the error names every missing one so
        a half-configured deployment fails on the first attempt, not the second.
        """

        if env is None:
            load_dotenv(override=False)
            env = os.environ

        required = [
            "NETSUITE_ACCOUNT_ID",
            "NETSUITE_CONSUMER_KEY",
            "NETSUITE_CONSUMER_SECRET",
            "NETSUITE_TOKEN_ID",
            "NETSUITE_TOKEN_SECRET",
            "HUBSPOT_ACCESS_TOKEN",
        ]
        missing = [name for name in required if not (env.get(name) or "").strip()]
        if missing:
            raise AuthConfigError(
                f"Missing required environment variables: {', '.join(missing)}",
                {"missing": missing},
            )

        return cls(
            netsuite=NetSuiteCredentials(
                account_id=env["NETSUITE_ACCOUNT_ID"].strip(),
                consumer_key=env["NETSUITE_CONSUMER_KEY"].strip(),
                consumer_secret=env["NETSUITE_CONSUMER_SECRET"].strip(),
                token_id=env["NETSUITE_TOKEN_ID"].strip(),
                token_secret=env["NETSUITE_TOKEN_SECRET"].strip(),
            ),
            hubspot_access_token=env["HUBSPOT_ACCESS_TOKEN"].strip(),
            name_match_policy=_env_enum(
                env, "NAME_MATCH_POLICY", NameMatchPolicy, NameMatchPolicy.EXACT
            ),
            unmatched_policy=_env_enum(
                env, "UNMATCHED_POLICY", UnmatchedPolicy, UnmatchedPolicy.CREATE
            ),
            pacing_seconds=_env_float(env, "SYNC_PACING_SECONDS", 0.1),
            http_timeout_seconds=_env_float(
                env, "HTTP_TIMEOUT_SECONDS", 30.0, allow_zero=False
            ),
            netsuite_rest_fallback=_env_flag(env, "NETSUITE_REST_FALLBACK"),
            sync_on_start=_env_flag(env, "SYNC_ON_START"),
            log_level=(env.get("LOG_LEVEL") or "INFO").strip().upper(),
        )
