"""Loading of the route and model classification tables.

The tables are read once per process from a YAML file (see
:mod:`constrained_model_sanitizer.config_paths`) and are immutable afterwards.

Typical usage:

    from constrained_model_sanitizer.rules import get_default_rules

    rules = get_default_rules()
    rules.registry.is_constrained("gpt-5-preview")
"""

import threading
from dataclasses import dataclass
from typing import Any, Dict, Optional, Tuple

import yaml

from .config_paths import get_rules_path
from .errors import (
    ConfigFileNotFoundError,
    ConfigurationError,
    InvalidConfigFormatError,
    RuleValidationError,
)
from .logging import LogEvent, log_error, log_info
from .models import ConstrainedModelRegistry
from .routes import RouteRule

SUPPORTED_RULES_VERSION = 1


@dataclass(frozen=True)
class RuleSet:
    """Route rules plus the constrained model registry."""

    routes: Tuple[RouteRule, ...]
    registry: ConstrainedModelRegistry
    path: Optional[str] = None


def load_rules_file(path: str) -> Dict[str, Any]:
    """Read and parse a rules file.

    Args:
        path: Path to the YAML file

    Returns:
        The parsed YAML mapping

    Raises:
        ConfigFileNotFoundError: If the file does not exist
        InvalidConfigFormatError: If the file cannot be read or is not a mapping
    """
    try:
        with open(path, "r", encoding="utf-8") as f:
            data = yaml.safe_load(f)
    except FileNotFoundError:
        raise ConfigFileNotFoundError(f"Rules file not found: {path}", path=path) from None
    except yaml.YAMLError as e:
        raise InvalidConfigFormatError(f"YAML parsing error in {path}: {e}", path=path) from e
    except OSError as e:
        raise InvalidConfigFormatError(f"Could not read {path}: {e}", path=path) from e

    if not isinstance(data, dict):
        raise InvalidConfigFormatError(
            f"Invalid rules format in {path}: expected dictionary, got {type(data).__name__}",
            path=path,
        )
    return data


def build_rules(data: Dict[str, Any], path: Optional[str] = None) -> RuleSet:
    """Validate a parsed rules mapping.

    Args:
        data: Parsed YAML document
        path: Source path, for error messages

    Returns:
        The validated rule set

    Raises:
        InvalidConfigFormatError: If a section has the wrong shape
        RuleValidationError: If a route rule is malformed
    """
    version = data.get("version", SUPPORTED_RULES_VERSION)
    if version != SUPPORTED_RULES_VERSION:
        raise InvalidConfigFormatError(
            f"Unsupported rules version {version!r}, expected {SUPPORTED_RULES_VERSION}",
            path=path,
            expected_type="int",
        )

    raw_routes = data.get("routes")
    if not isinstance(raw_routes, list) or not raw_routes:
        raise InvalidConfigFormatError(
            "'routes' must be a non-empty list",
            path=path,
            expected_type="list",
        )
    routes = tuple(RouteRule.from_dict(entry) for entry in raw_routes)

    try:
        registry = ConstrainedModelRegistry.from_dict(data.get("constrained_models") or {})
    except InvalidConfigFormatError as e:
        raise InvalidConfigFormatError(e.message, path=path, expected_type=e.expected_type) from None

    return RuleSet(routes=routes, registry=registry, path=path)


def load_rules(path: Optional[str] = None) -> RuleSet:
    """Load the rule set from ``path`` or the resolved default location.

    Raises:
        ConfigFileNotFoundError: If the file does not exist
        InvalidConfigFormatError: If the file cannot be parsed or validated
        RuleValidationError: If a route rule is malformed
    """
    path = path or get_rules_path()
    try:
        data = load_rules_file(path)
    except ConfigurationError as e:
        log_error(LogEvent.RULES_LOAD, e.message, path=path)
        raise

    try:
        rules = build_rules(data, path=path)
    except (ConfigurationError, RuleValidationError) as e:
        log_error(LogEvent.RULES_LOAD, f"Invalid rules in {path}: {e}", path=path)
        raise

    log_info(
        LogEvent.RULES_LOAD,
        f"Loaded {len(rules.routes)} route rules and "
        f"{len(rules.registry.exact) + len(rules.registry.prefixes)} model rules",
        path=path,
    )
    return rules


_default_rules: Optional[RuleSet] = None
_default_lock = threading.RLock()


def get_default_rules() -> RuleSet:
    """Return the process-wide rule set, loading it on first use."""
    global _default_rules
    rules = _default_rules
    if rules is not None:
        return rules
    with _default_lock:
        if _default_rules is None:
            _default_rules = load_rules()
        return _default_rules


def reset_default_rules() -> None:
    """Drop the cached rule set so the next call reloads it."""
    global _default_rules
    with _default_lock:
        _default_rules = None
