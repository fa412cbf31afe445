"""Route classification for generation endpoints.

Maps a request method and path onto an :class:`EndpointFamily`. The rule
table is data (see ``config/rules.yml``); this module only evaluates it.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, Optional, Sequence, Tuple

from .errors import RuleValidationError
from .logging import LogEvent, log_debug


class EndpointFamily(str, Enum):
    """Endpoint families, keyed by how they name the token-limit field."""

    NOT_APPLICABLE = "not_applicable"
    CHAT = "chat"
    RESPONSES = "responses"
    RUN = "run"
    UNCLASSIFIED = "unclassified"


@dataclass(frozen=True)
class RouteRule:
    """A single prefix/substring route rule."""

    family: EndpointFamily
    prefix: str = ""
    contains: Tuple[str, ...] = ()

    def __post_init__(self) -> None:
        if self.family is EndpointFamily.NOT_APPLICABLE:
            raise RuleValidationError("Route rules cannot target 'not_applicable'")
        if not self.prefix and not self.contains:
            raise RuleValidationError(
                f"Route rule for '{self.family.value}' needs a prefix or contains fragment"
            )

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "RouteRule":
        """Build a rule from its YAML mapping.

        Args:
            data: Mapping with ``family`` and ``prefix`` and/or ``contains``

        Returns:
            The validated rule

        Raises:
            RuleValidationError: If the mapping is malformed
        """
        if not isinstance(data, dict):
            raise RuleValidationError(
                f"Route rule must be a mapping, got {type(data).__name__}",
            )
        try:
            family = EndpointFamily(data.get("family"))
        except ValueError:
            allowed = ", ".join(f.value for f in EndpointFamily if f is not EndpointFamily.NOT_APPLICABLE)
            raise RuleValidationError(
                f"Unknown route family {data.get('family')!r}. Allowed: {allowed}",
                rule=data,
            ) from None

        prefix = data.get("prefix") or ""
        contains = data.get("contains") or []
        if isinstance(contains, str):
            contains = [contains]
        if not isinstance(prefix, str) or not all(isinstance(c, str) and c for c in contains):
            raise RuleValidationError("Route prefix and contains fragments must be strings", rule=data)

        try:
            return cls(family=family, prefix=prefix, contains=tuple(contains))
        except RuleValidationError as e:
            raise RuleValidationError(e.message, rule=data) from None

    @property
    def specificity(self) -> int:
        """Length of the path text this rule pins down."""
        return len(self.prefix) + sum(len(fragment) for fragment in self.contains)

    def matches(self, path: str) -> bool:
        """Check whether ``path`` satisfies this rule."""
        if self.prefix and not path.startswith(self.prefix):
            return False
        return all(fragment in path for fragment in self.contains)


def match_route(path: str, routes: Sequence[RouteRule]) -> Optional[RouteRule]:
    """Return the most specific rule matching ``path``, if any.

    Ties keep the rule that appears first in ``routes``.
    """
    best: Optional[RouteRule] = None
    for rule in routes:
        if rule.matches(path) and (best is None or rule.specificity > best.specificity):
            best = rule
    return best


def classify_route(
    method: str,
    path: str,
    routes: Optional[Sequence[RouteRule]] = None,
) -> EndpointFamily:
    """Classify a request into an endpoint family.

    Args:
        method: HTTP method; only POST is eligible
        path: Request path, without query string
        routes: Rule table. Defaults to the loaded default rules.

    Returns:
        The endpoint family, or ``EndpointFamily.NOT_APPLICABLE``
    """
    if not method or method.upper() != "POST" or not path:
        return EndpointFamily.NOT_APPLICABLE

    if routes is None:
        from .rules import get_default_rules

        routes = get_default_rules().routes

    rule = match_route(path, routes)
    if rule is None:
        return EndpointFamily.NOT_APPLICABLE

    log_debug(
        LogEvent.ROUTE_CLASSIFICATION,
        f"Classified {path} as {rule.family.value}",
        path=path,
        family=rule.family.value,
    )
    return rule.family
