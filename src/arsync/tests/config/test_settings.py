from __future__ import annotations

import pytest

from src.arsync.config.settings import NameMatchPolicy, SyncSettings, UnmatchedPolicy
from src.arsync.errors import AuthConfigError


def test_from_env_builds_settings_with_defaults(sync_env) -> None:
    settings = SyncSettings.from_env(sync_env)

    assert settings.netsuite.account_id == "1234567_SB1"
    assert settings.netsuite.host_account == "1234567-sb1"
    assert settings.netsuite.realm == "1234567_SB1"
    assert settings.hubspot_access_token == "pat-na1-test"
    assert settings.name_match_policy == NameMatchPolicy.EXACT
    assert settings.unmatched_policy == UnmatchedPolicy.CREATE
    assert settings.pacing_seconds == 0.1
    assert settings.http_timeout_seconds == 30.0
    assert settings.netsuite_rest_fallback is False
    assert settings.sync_on_start is False


def test_missing_credentials_are_all_named(sync_env) -> None:
    env = dict(sync_env)
    del env["NETSUITE_TOKEN_SECRET"]
    env["HUBSPOT_ACCESS_TOKEN"] = "  "

    with pytest.raises(AuthConfigError) as excinfo:
        SyncSettings.from_env(env)
    assert excinfo.value.details["missing"] == ["NETSUITE_TOKEN_SECRET", "HUBSPOT_ACCESS_TOKEN"]


def test_policies_and_flags_are_parsed(sync_env) -> None:
    env = dict(
        sync_env,
        NAME_MATCH_POLICY="FIRST_TOKEN",
        UNMATCHED_POLICY="skip",
        SYNC_PACING_SECONDS="0.25",
        HTTP_TIMEOUT_SECONDS="10",
        NETSUITE_REST_FALLBACK="true",
        SYNC_ON_START="1",
        LOG_LEVEL="debug",
    )
    settings = SyncSettings.from_env(env)

    assert settings.name_match_policy == NameMatchPolicy.FIRST_TOKEN
    assert settings.unmatched_policy == UnmatchedPolicy.SKIP
    assert settings.pacing_seconds == 0.25
    assert settings.http_timeout_seconds == 10.0
    assert settings.netsuite_rest_fallback is True
    assert settings.sync_on_start is True
    assert settings.log_level == "DEBUG"


@pytest.mark.parametrize(
    "name,value",
    [
        ("UNMATCHED_POLICY", "upsert"),
        ("NAME_MATCH_POLICY", "fuzzy"),
        ("SYNC_PACING_SECONDS", "fast"),
        ("HTTP_TIMEOUT_SECONDS", "-1"),
        ("HTTP_TIMEOUT_SECONDS", "0"),
        ("SYNC_PACING_SECONDS", "-0.5"),
    ],
)
def test_invalid_values_fail_at_startup(sync_env, name, value) -> None:
    with pytest.raises(AuthConfigError):
        SyncSettings.from_env(dict(sync_env, **{name: value}))


def test_zero_pacing_is_allowed(sync_env) -> None:
    settings = SyncSettings.from_env(dict(sync_env, SYNC_PACING_SECONDS="0"))
    assert settings.pacing_seconds == 0.0


def test_repr_hides_secrets(sync_env) -> None:
    text = repr(SyncSettings.from_env(sync_env))
    assert "test_consumer_secret" not in text
    assert "test_token_secret" not in text
    assert "pat-na1-test" not in text
