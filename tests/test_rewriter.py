"""Tests for the parameter rewriter."""

import copy
from typing import Any, Dict

import pytest

from constrained_model_sanitizer.rewriter import (
    MAX_COMPLETION_TOKENS,
    MAX_OUTPUT_TOKENS,
    TOKEN_FIELD_TARGETS,
    rewrite_parameters,
    token_field_target,
)
from constrained_model_sanitizer.routes import EndpointFamily

GENERATION_FAMILIES = [
    EndpointFamily.CHAT,
    EndpointFamily.RESPONSES,
    EndpointFamily.RUN,
    EndpointFamily.UNCLASSIFIED,
]


class TestSamplingFields:
    """Tests for removal of sampling parameters."""

    @pytest.mark.parametrize("family", GENERATION_FAMILIES)
    @pytest.mark.parametrize("value", [0, 0.7, None, {"nested": [1, 2]}, "hot"])
    def test_removed_for_every_family(self, family: EndpointFamily, value: Any) -> None:
        """Test that temperature and top_p never survive, whatever their value."""
        body = {"model": "o1", "temperature": value, "top_p": value}
        patched = rewrite_parameters(body, family)
        assert patched is not None
        assert "temperature" not in patched
        assert "top_p" not in patched
        assert patched["model"] == "o1"

    def test_other_fields_untouched(self) -> None:
        """Test that unrelated fields are carried over as-is."""
        messages = [{"role": "user", "content": "hi"}]
        body = {"model": "o1", "temperature": 1, "messages": messages, "stream": True, "n": None}
        patched = rewrite_parameters(body, EndpointFamily.CHAT)
        assert patched == {"model": "o1", "messages": messages, "stream": True, "n": None}


class TestTokenField:
    """Tests for renaming max_tokens by endpoint family."""

    def test_responses_family(self) -> None:
        """Test rename to max_output_tokens on responses routes."""
        patched = rewrite_parameters({"model": "o1", "temperature": 0.7, "max_tokens": 500}, EndpointFamily.RESPONSES)
        assert patched == {"model": "o1", "max_output_tokens": 500}

    def test_run_family(self) -> None:
        """Test rename to max_completion_tokens on run routes."""
        patched = rewrite_parameters({"model": "gpt-5-preview", "top_p": 0.9, "max_tokens": 256}, EndpointFamily.RUN)
        assert patched == {"model": "gpt-5-preview", "max_completion_tokens": 256}

    def test_existing_target_wins(self) -> None:
        """Test that a pre-existing target keeps its value and max_tokens is dropped."""
        body = {"model": "o3", "max_completion_tokens": 10, "max_tokens": 999}
        patched = rewrite_parameters(body, EndpointFamily.RUN)
        assert patched == {"model": "o3", "max_completion_tokens": 10}

    def test_chat_family_keeps_max_tokens(self) -> None:
        """Test that chat routes keep the field name by default."""
        body = {"model": "gpt-4o", "max_tokens": 100}
        assert rewrite_parameters(body, EndpointFamily.CHAT) is None

    def test_chat_family_with_compat_flag(self) -> None:
        """Test that the compatibility flag renames on chat routes."""
        body = {"model": "gpt-4o", "max_tokens": 100}
        patched = rewrite_parameters(body, EndpointFamily.CHAT, compat_max_completion_tokens=True)
        assert patched == {"model": "gpt-4o", "max_completion_tokens": 100}

    def test_unclassified_behaves_as_run_with_flag(self) -> None:
        """Test the unclassified family with and without the flag."""
        body = {"model": "o1", "max_tokens": 64}
        assert rewrite_parameters(body, EndpointFamily.UNCLASSIFIED) is None
        patched = rewrite_parameters(body, EndpointFamily.UNCLASSIFIED, compat_max_completion_tokens=True)
        assert patched == {"model": "o1", "max_completion_tokens": 64}

    def test_flag_does_not_change_explicit_targets(self) -> None:
        """Test that responses routes still use max_output_tokens with the flag on."""
        patched = rewrite_parameters(
            {"model": "o1", "max_tokens": 5}, EndpointFamily.RESPONSES, compat_max_completion_tokens=True
        )
        assert patched == {"model": "o1", MAX_OUTPUT_TOKENS: 5}

    def test_null_max_tokens_is_absent(self) -> None:
        """Test that a null max_tokens triggers no token-field change."""
        body: Dict[str, Any] = {"model": "o1", "max_tokens": None}
        assert rewrite_parameters(body, EndpointFamily.RUN) is None

    def test_null_max_tokens_with_sampling_field(self) -> None:
        """Test that a null max_tokens is left in place when other fields change."""
        patched = rewrite_parameters({"model": "o1", "top_p": 1, "max_tokens": None}, EndpointFamily.RUN)
        assert patched == {"model": "o1", "max_tokens": None}

    def test_no_source_field(self) -> None:
        """Test that nothing changes without any relevant field."""
        assert rewrite_parameters({"model": "o1", "input": "hi"}, EndpointFamily.RESPONSES) is None


def test_input_is_not_mutated() -> None:
    """Test that the rewriter works on a copy."""
    body = {"model": "o1", "temperature": 0.2, "max_tokens": 50, "metadata": {"a": 1}}
    snapshot = copy.deepcopy(body)
    rewrite_parameters(body, EndpointFamily.RESPONSES)
    assert body == snapshot


@pytest.mark.parametrize("family", GENERATION_FAMILIES)
@pytest.mark.parametrize("compat", [False, True])
def test_rewrite_is_idempotent(family: EndpointFamily, compat: bool) -> None:
    """Test that a second rewrite pass changes nothing."""
    body = {"model": "o1", "temperature": 0.5, "top_p": 0.1, "max_tokens": 10}
    first = rewrite_parameters(body, family, compat)
    assert first is not None
    assert rewrite_parameters(first, family, compat) is None


def test_token_field_targets_table() -> None:
    """Test the family to target lookup table."""
    assert TOKEN_FIELD_TARGETS[EndpointFamily.CHAT] is None
    assert TOKEN_FIELD_TARGETS[EndpointFamily.RESPONSES] == MAX_OUTPUT_TOKENS
    assert TOKEN_FIELD_TARGETS[EndpointFamily.RUN] == MAX_COMPLETION_TOKENS
    assert TOKEN_FIELD_TARGETS[EndpointFamily.UNCLASSIFIED] is None
    assert token_field_target(EndpointFamily.NOT_APPLICABLE, True) is None
    assert token_field_target(EndpointFamily.CHAT, True) == MAX_COMPLETION_TOKENS
