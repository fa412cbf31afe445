"""Body transport: read, classify, rewrite and re-serialize a request body.

:class:`BodyTransport` is framework-agnostic. It takes the raw body bytes and
always hands back the bytes that must be delivered downstream, which are the
original bytes unless a rewrite completed.
"""

import json
import math
from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, Optional

from .config import SanitizerConfig
from .logging import LogEvent, log_debug, log_error, log_warning
from .models import is_constrained_model
from .rewriter import rewrite_parameters
from .routes import EndpointFamily, classify_route
from .rules import RuleSet, get_default_rules


class TransportOutcome(str, Enum):
    """Exit path taken for a request body."""

    REWRITTEN = "rewritten"
    ROUTE_NOT_MATCHED = "route_not_matched"
    READ_ERROR = "read_error"
    EMPTY_BODY = "empty_body"
    PARSE_ERROR = "parse_error"
    NOT_AN_OBJECT = "not_an_object"
    MODEL_NOT_CONSTRAINED = "model_not_constrained"
    NO_CHANGE = "no_change"
    SERIALIZE_ERROR = "serialize_error"
    INTERNAL_ERROR = "internal_error"


@dataclass(frozen=True)
class TransportResult:
    """Bytes to deliver downstream and how they were produced."""

    body: bytes
    outcome: TransportOutcome
    family: EndpointFamily = EndpointFamily.NOT_APPLICABLE

    @property
    def rewritten(self) -> bool:
        """Whether ``body`` differs from the inbound payload."""
        return self.outcome is TransportOutcome.REWRITTEN

    @property
    def content_length(self) -> int:
        """Length of ``body`` in bytes."""
        return len(self.body)


def _reject_constant(name: str) -> Any:
    raise ValueError(f"{name} is not valid JSON")


def _parse_finite_float(text: str) -> float:
    value = float(text)
    if not math.isfinite(value):
        raise ValueError(f"number {text} is out of range")
    return value


def parse_body(raw: bytes) -> Any:
    """Parse a request body as strict JSON.

    ``NaN``, ``Infinity`` and numbers that overflow to infinity are rejected,
    so such bodies are passed through rather than re-serialized.

    Raises:
        ValueError: If ``raw`` is not valid JSON
    """
    return json.loads(raw, parse_constant=_reject_constant, parse_float=_parse_finite_float)


def serialize_body(body: Dict[str, Any]) -> bytes:
    """Serialize a rewritten body as compact UTF-8 JSON."""
    return json.dumps(body, ensure_ascii=False, allow_nan=False, separators=(",", ":")).encode("utf-8")


class BodyTransport:
    """Runs the sanitizer pipeline over one request body at a time.

    Instances hold only immutable configuration and are safe to share across
    concurrent requests.
    """

    def __init__(
        self,
        config: Optional[SanitizerConfig] = None,
        rules: Optional[RuleSet] = None,
    ) -> None:
        """Initialize the transport.

        Args:
            config: Fixed configuration. If None, the environment is read on
                every request so changes apply without a restart.
            rules: Classification tables. If None, the default rules are
                loaded on first use.
        """
        self._config = config
        self._rules = rules

    @property
    def rules(self) -> RuleSet:
        return self._rules if self._rules is not None else get_default_rules()

    def current_config(self) -> SanitizerConfig:
        """Return the configuration to use for the next request."""
        return self._config if self._config is not None else SanitizerConfig.from_env()

    def classify(self, method: str, path: str) -> EndpointFamily:
        """Classify a request route with this transport's rules."""
        return classify_route(method, path, self.rules.routes)

    def process(self, method: str, path: str, raw: bytes) -> TransportResult:
        """Sanitize one request body.

        Never raises: every failure degrades to returning ``raw`` unchanged.

        Args:
            method: HTTP method
            path: Request path
            raw: Complete inbound body

        Returns:
            TransportResult carrying the bytes to deliver downstream
        """
        family = EndpointFamily.NOT_APPLICABLE
        try:
            family = self.classify(method, path)
            return self._process(family, path, raw)
        except Exception as e:
            log_error(
                LogEvent.BODY_TRANSPORT,
                f"Sanitizer failed, passing body through unchanged: {e}",
                path=path,
                error=str(e),
            )
            return TransportResult(raw, TransportOutcome.INTERNAL_ERROR, family)

    def _process(self, family: EndpointFamily, path: str, raw: bytes) -> TransportResult:
        if family is EndpointFamily.NOT_APPLICABLE:
            return TransportResult(raw, TransportOutcome.ROUTE_NOT_MATCHED, family)

        if not raw:
            return TransportResult(raw, TransportOutcome.EMPTY_BODY, family)

        try:
            body = parse_body(raw)
        except (ValueError, RecursionError) as e:
            # ValueError covers JSONDecodeError and undecodable bytes
            log_debug(LogEvent.BODY_TRANSPORT, f"Body is not valid JSON: {e}", path=path)
            return TransportResult(raw, TransportOutcome.PARSE_ERROR, family)

        if not isinstance(body, dict):
            return TransportResult(raw, TransportOutcome.NOT_AN_OBJECT, family)

        config = self.current_config()
        if not is_constrained_model(body.get("model"), config, self.rules.registry):
            return TransportResult(raw, TransportOutcome.MODEL_NOT_CONSTRAINED, family)

        patched = rewrite_parameters(body, family, config.compat_max_completion_tokens)
        if patched is None:
            return TransportResult(raw, TransportOutcome.NO_CHANGE, family)

        try:
            payload = serialize_body(patched)
        except (TypeError, ValueError, RecursionError) as e:
            log_warning(
                LogEvent.BODY_TRANSPORT,
                f"Could not serialize rewritten body, keeping original: {e}",
                path=path,
            )
            return TransportResult(raw, TransportOutcome.SERIALIZE_ERROR, family)

        log_debug(
            LogEvent.BODY_TRANSPORT,
            f"Replaced body for {path}",
            path=path,
            family=family.value,
            original_length=len(raw),
            content_length=len(payload),
        )
        return TransportResult(payload, TransportOutcome.REWRITTEN, family)
