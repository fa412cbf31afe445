"""Error types for the constrained model sanitizer.

These errors are raised while loading the rule tables. The per-request
rewrite path never raises them to the host application.
"""

from typing import Any, Dict, Optional


class SanitizerError(Exception):
    """Base class for all sanitizer-related errors."""

    pass


class ConfigurationError(SanitizerError):
    """Base class for configuration-related errors.

    This is raised for errors related to loading or parsing the rules file.
    """

    def __init__(self, message: str, path: Optional[str] = None) -> None:
        """Initialize configuration error.

        Args:
            message: Error message
            path: Optional path to the file that caused the error
        """
        super().__init__(message)
        self.message = message
        self.path = path


class ConfigFileNotFoundError(ConfigurationError):
    """Raised when the rules file cannot be found.

    Examples:
        >>> try:
        ...     load_rules("/missing/rules.yml")
        ... except ConfigFileNotFoundError as e:
        ...     print(f"Rules file not found: {e.path}")
    """

    pass


class InvalidConfigFormatError(ConfigurationError):
    """Raised when the rules file has an invalid format.

    Examples:
        >>> try:
        ...     load_rules("/etc/sanitizer/rules.yml")
        ... except InvalidConfigFormatError as e:
        ...     print(f"Expected {e.expected_type} in {e.path}")
    """

    def __init__(
        self,
        message: str,
        path: Optional[str] = None,
        expected_type: str = "dict",
    ) -> None:
        """Initialize invalid format error.

        Args:
            message: Error message
            path: Optional path to the rules file
            expected_type: Expected type of the offending section
        """
        super().__init__(message, path)
        self.expected_type = expected_type


class RuleValidationError(SanitizerError):
    """Raised when a single route rule is malformed.

    Examples:
        >>> try:
        ...     RouteRule.from_dict({"family": "bogus", "prefix": "/v1/x"})
        ... except RuleValidationError as e:
        ...     print(f"Bad rule: {e.rule}")
    """

    def __init__(self, message: str, rule: Optional[Dict[str, Any]] = None) -> None:
        """Initialize rule validation error.

        Args:
            message: Error message
            rule: The raw rule mapping that failed validation
        """
        super().__init__(message)
        self.message = message
        self.rule = rule

    def __str__(self) -> str:
        """Return string representation of the error."""
        return self.message
