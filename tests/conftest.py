"""Shared fixtures for the sanitizer tests."""

from pathlib import Path
from typing import Generator

import pytest

from constrained_model_sanitizer.config import (
    ENV_COMPAT_MAX_COMPLETION_TOKENS,
    ENV_CONSTRAINED_MODELS,
    ENV_CONSTRAINED_MODELS_LEGACY,
)
from constrained_model_sanitizer.config_paths import ENV_RULES_PATH
from constrained_model_sanitizer.rules import RuleSet, load_rules, reset_default_rules


@pytest.fixture(autouse=True)
def isolated_environment(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> Generator[None, None, None]:
    """Keep the host environment and user config dir out of every test."""
    for name in (
        ENV_COMPAT_MAX_COMPLETION_TOKENS,
        ENV_CONSTRAINED_MODELS,
        ENV_CONSTRAINED_MODELS_LEGACY,
        ENV_RULES_PATH,
    ):
        monkeypatch.delenv(name, raising=False)
    monkeypatch.setattr(
        "constrained_model_sanitizer.config_paths.get_user_config_dir",
        lambda: tmp_path / "user-config",
    )
    reset_default_rules()
    yield
    reset_default_rules()


@pytest.fixture
def bundled_rules() -> RuleSet:
    """The rule set shipped with the package."""
    from constrained_model_sanitizer.config_paths import get_default_rules_path

    return load_rules(get_default_rules_path())
