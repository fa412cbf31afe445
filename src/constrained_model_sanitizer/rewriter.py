"""Parameter rewriting for constrained models.

Drops the sampling parameters constrained models reject and renames
``max_tokens`` to the field the endpoint family expects.
"""

from typing import Any, Dict, Mapping, Optional

from .logging import LogEvent, log_debug
from .routes import EndpointFamily

SOURCE_TOKEN_FIELD = "max_tokens"
MAX_OUTPUT_TOKENS = "max_output_tokens"
MAX_COMPLETION_TOKENS = "max_completion_tokens"

# Removed regardless of endpoint family or value
DISALLOWED_SAMPLING_FIELDS = ("temperature", "top_p")

# None keeps ``max_tokens`` as is
TOKEN_FIELD_TARGETS: Dict[EndpointFamily, Optional[str]] = {
    EndpointFamily.CHAT: None,
    EndpointFamily.RESPONSES: MAX_OUTPUT_TOKENS,
    EndpointFamily.RUN: MAX_COMPLETION_TOKENS,
    EndpointFamily.UNCLASSIFIED: None,
}

# Used instead of a None target when the compatibility flag is on
COMPAT_TOKEN_FIELD = MAX_COMPLETION_TOKENS


def token_field_target(family: EndpointFamily, compat_max_completion_tokens: bool = False) -> Optional[str]:
    """Return the field ``max_tokens`` should be renamed to, if any.

    Args:
        family: Endpoint family of the request
        compat_max_completion_tokens: Fall back to ``max_completion_tokens``
            for families that otherwise keep ``max_tokens``

    Returns:
        The target field name, or None for no rename
    """
    if family not in TOKEN_FIELD_TARGETS:
        return None
    target = TOKEN_FIELD_TARGETS[family]
    if target is None and compat_max_completion_tokens:
        return COMPAT_TOKEN_FIELD
    return target


def rewrite_parameters(
    body: Mapping[str, Any],
    family: EndpointFamily,
    compat_max_completion_tokens: bool = False,
) -> Optional[Dict[str, Any]]:
    """Rewrite a constrained-model request body.

    The input mapping is left untouched; changes are applied to a shallow
    copy. Nested values are shared, they are never modified.

    Args:
        body: Parsed JSON object of the request
        family: Endpoint family of the request
        compat_max_completion_tokens: See :func:`token_field_target`

    Returns:
        The rewritten body, or None if nothing needed to change
    """
    patched = dict(body)

    removed = [field for field in DISALLOWED_SAMPLING_FIELDS if field in patched]
    for field in removed:
        del patched[field]

    renamed_to: Optional[str] = None
    target = token_field_target(family, compat_max_completion_tokens)
    if target is not None and patched.get(SOURCE_TOKEN_FIELD) is not None:
        # An explicit target value wins; max_tokens is dropped either way
        if target not in patched:
            patched[target] = patched[SOURCE_TOKEN_FIELD]
        del patched[SOURCE_TOKEN_FIELD]
        renamed_to = target

    if not removed and renamed_to is None:
        return None

    log_debug(
        LogEvent.PARAMETER_REWRITE,
        "Rewrote constrained model parameters",
        family=family.value,
        removed=removed,
        renamed_to=renamed_to,
    )
    return patched
