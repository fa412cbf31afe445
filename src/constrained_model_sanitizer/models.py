"""Constrained model classification.

A model is "constrained" when the upstream provider rejects sampling
parameters for it and expects a different token-limit field name.
"""

from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, Dict, FrozenSet, Iterable, Optional, Tuple

from .errors import InvalidConfigFormatError
from .logging import LogEvent, log_debug

if TYPE_CHECKING:
    from .config import SanitizerConfig


def normalize_model_name(model: Any) -> str:
    """Trim and lowercase a model identifier.

    Non-string values normalize to the empty string.
    """
    if not isinstance(model, str):
        return ""
    return model.strip().lower()


def _name_list(data: Dict[str, Any], key: str) -> Tuple[str, ...]:
    values = data.get(key) or []
    if not isinstance(values, list) or not all(isinstance(v, str) for v in values):
        raise InvalidConfigFormatError(
            f"constrained_models.{key} must be a list of strings",
            expected_type="list",
        )
    return tuple(normalize_model_name(v) for v in values if v.strip())


@dataclass(frozen=True)
class ConstrainedModelRegistry:
    """Built-in exact names and family prefixes of constrained models.

    Entries are stored normalized (trimmed, lowercase).
    """

    exact: FrozenSet[str] = frozenset()
    prefixes: Tuple[str, ...] = ()

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "ConstrainedModelRegistry":
        """Build a registry from the ``constrained_models`` YAML section.

        Raises:
            InvalidConfigFormatError: If a section is not a list of strings
        """
        if not isinstance(data, dict):
            raise InvalidConfigFormatError(
                f"constrained_models must be a mapping, got {type(data).__name__}",
            )
        return cls(
            exact=frozenset(_name_list(data, "exact")),
            prefixes=_name_list(data, "prefixes"),
        )

    def is_constrained(self, model: Any, extra_models: Iterable[str] = ()) -> bool:
        """Check a model identifier against the registry.

        Args:
            model: Raw ``model`` value from the request body
            extra_models: Operator-supplied exact names, compared trimmed
                and case-insensitively

        Returns:
            True if the model is constrained
        """
        normalized = normalize_model_name(model)
        if not normalized:
            return False

        if normalized in self.exact:
            return True

        if normalized.startswith(self.prefixes):
            return True

        return any(normalize_model_name(extra) == normalized for extra in extra_models)


def is_constrained_model(
    model: Any,
    config: Optional["SanitizerConfig"] = None,
    registry: Optional[ConstrainedModelRegistry] = None,
) -> bool:
    """Decide whether ``model`` targets a constrained model family.

    Args:
        model: Raw ``model`` value; absent or non-string values are never
            constrained
        config: Supplies the extension list. Defaults to the environment.
        registry: Built-in tables. Defaults to the loaded default rules.

    Returns:
        True if the model is constrained
    """
    if registry is None:
        from .rules import get_default_rules

        registry = get_default_rules().registry
    if config is None:
        from .config import SanitizerConfig

        config = SanitizerConfig.from_env()

    constrained = registry.is_constrained(model, config.extra_models)
    log_debug(
        LogEvent.MODEL_CLASSIFICATION,
        f"Model {model!r} constrained={constrained}",
        model=model if isinstance(model, str) else None,
        constrained=constrained,
    )
    return constrained
