"""Runtime configuration for the sanitizer.

The host builds a :class:`SanitizerConfig` once (usually with
:meth:`SanitizerConfig.from_env`) and injects it, or lets the middleware
re-read the environment on every request.
"""

import os
from dataclasses import dataclass
from typing import Mapping, Optional, Tuple

# Environment variable names
ENV_COMPAT_MAX_COMPLETION_TOKENS = "CMS_COMPAT_MAX_COMPLETION_TOKENS"
ENV_CONSTRAINED_MODELS = "CMS_CONSTRAINED_MODELS"
# Name used by the one-api gateway this shim originally shipped with
ENV_CONSTRAINED_MODELS_LEGACY = "ONEAPI_CONSTRAINED_MODELS"

_TRUE_VALUES = frozenset({"1", "true", "yes", "on"})


def parse_bool(value: Optional[str]) -> bool:
    """Interpret a boolean-like environment string.

    Args:
        value: Raw value, e.g. ``"true"`` or ``"FALSE"``

    Returns:
        True only for recognised truthy spellings; anything else is False
    """
    if value is None:
        return False
    return value.strip().lower() in _TRUE_VALUES


def parse_model_list(value: Optional[str]) -> Tuple[str, ...]:
    """Split a comma-separated model list, dropping blank entries.

    Entries are kept as written. Matching trims and lowercases at
    comparison time.
    """
    if not value or not value.strip():
        return ()
    return tuple(entry for entry in value.split(",") if entry.strip())


@dataclass(frozen=True)
class SanitizerConfig:
    """Process-wide sanitizer settings.

    Attributes:
        extra_models: Additional exact model names treated as constrained
        compat_max_completion_tokens: Rename ``max_tokens`` to
            ``max_completion_tokens`` on chat-style and unclassified routes
    """

    extra_models: Tuple[str, ...] = ()
    compat_max_completion_tokens: bool = False

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> "SanitizerConfig":
        """Build a configuration from environment variables.

        Args:
            environ: Mapping to read from. Defaults to ``os.environ``.

        Returns:
            A new immutable configuration
        """
        env = os.environ if environ is None else environ
        models_value = env.get(ENV_CONSTRAINED_MODELS)
        if models_value is None:
            models_value = env.get(ENV_CONSTRAINED_MODELS_LEGACY)
        return cls(
            extra_models=parse_model_list(models_value),
            compat_max_completion_tokens=parse_bool(env.get(ENV_COMPAT_MAX_COMPLETION_TOKENS)),
        )
