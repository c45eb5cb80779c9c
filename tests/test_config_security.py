from __future__ import annotations

import pytest
from pydantic import ValidationError

from backoffice.core.config import Settings


def test_default_secret_key_allowed_in_development() -> None:
    settings = Settings(_env_file=None, app_env="development", secret_key="change-me")
    assert settings.secret_key == "change-me"


def test_default_secret_key_rejected_in_production() -> None:
    with pytest.raises(ValidationError):
        Settings(_env_file=None, app_env="production", secret_key="change-me")


def test_placeholder_secret_key_prefix_rejected_in_production() -> None:
    with pytest.raises(ValidationError):
        Settings(_env_file=None, app_env="prod", secret_key="change-me-in-production")


def test_custom_secret_key_allowed_in_production() -> None:
    settings = Settings(_env_file=None, app_env="production", secret_key="super-secure-value")
    assert settings.secret_key == "super-secure-value"


def test_policy_tokens_are_normalized() -> None:
    settings = Settings(
        _env_file=None,
        audit_failure_mode="Fail-Closed",
        refund_balance_policy=" CLAMP ",
    )
    assert settings.audit_failure_mode == "fail_closed"
    assert settings.refund_balance_policy == "clamp"


def test_unknown_policy_token_rejected() -> None:
    with pytest.raises(ValidationError):
        Settings(_env_file=None, refund_balance_policy="overdraft")


def test_bootstrap_credentials_must_come_in_pairs() -> None:
    with pytest.raises(ValidationError):
        Settings(_env_file=None, bootstrap_admin_email="root@backoffice.dev")

    settings = Settings(
        _env_file=None,
        bootstrap_admin_email="root@backoffice.dev",
        bootstrap_admin_password="StrongPass123!",
    )
    assert settings.bootstrap_admin_name == "Super Admin"


def test_default_analytics_range_must_fit_maximum() -> None:
    with pytest.raises(ValidationError):
        Settings(_env_file=None, analytics_default_range_days=90, analytics_max_range_days=31)
