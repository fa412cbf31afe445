"""Request-body compatibility shim for constrained LLM models.

Some model families reject sampling parameters such as ``temperature`` and
``top_p`` and expect an endpoint-specific token-limit field. This package
detects generation requests that target such models and rewrites their JSON
body, leaving every other request byte-for-byte untouched.
"""

# Version of the package
try:
    from importlib.metadata import PackageNotFoundError
    from importlib.metadata import version as _version

    try:
        __version__ = _version("constrained-model-sanitizer")
    except PackageNotFoundError:
        __version__ = "0.0.0"
except ImportError:
    raise ImportError(
        "Failed to determine package version. This package requires Python 3.8+ "
        "where importlib.metadata is available, or must be installed as a package."
    )

# Import main components for easier access
from .config import SanitizerConfig
from .errors import (
    ConfigFileNotFoundError,
    ConfigurationError,
    InvalidConfigFormatError,
    RuleValidationError,
    SanitizerError,
)
from .middleware import ConstrainedModelMiddleware
from .models import ConstrainedModelRegistry, is_constrained_model
from .rewriter import TOKEN_FIELD_TARGETS, rewrite_parameters
from .routes import EndpointFamily, RouteRule, classify_route
from .rules import RuleSet, get_default_rules, load_rules
from .transport import BodyTransport, TransportOutcome, TransportResult

# Define public API
__all__ = [
    # Pipeline
    "BodyTransport",
    "TransportOutcome",
    "TransportResult",
    "ConstrainedModelMiddleware",
    # Classification
    "EndpointFamily",
    "RouteRule",
    "classify_route",
    "ConstrainedModelRegistry",
    "is_constrained_model",
    # Rewriting
    "TOKEN_FIELD_TARGETS",
    "rewrite_parameters",
    # Configuration
    "SanitizerConfig",
    "RuleSet",
    "get_default_rules",
    "load_rules",
    # Errors
    "SanitizerError",
    "ConfigurationError",
    "ConfigFileNotFoundError",
    "InvalidConfigFormatError",
    "RuleValidationError",
]
