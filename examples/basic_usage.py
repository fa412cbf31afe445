#!/usr/bin/env python3
"""Example of running request bodies through the sanitizer."""

import json
import logging

from constrained_model_sanitizer import BodyTransport, SanitizerConfig


def show(transport, path, body):
    """Print what the transport does with one request.

    Args:
        transport: The BodyTransport to use
        path: Request path
        body: Request body as a dict
    """
    raw = json.dumps(body).encode("utf-8")
    result = transport.process("POST", path, raw)
    print(f"POST {path}")
    print(f"  in:  {raw.decode()}")
    print(f"  out: {result.body.decode()} ({result.outcome.value})")
    print()


def main():
    """Run the example."""
    logging.basicConfig(level=logging.DEBUG)
    transport = BodyTransport(config=SanitizerConfig(extra_models=("house-reasoner",)))

    show(transport, "/v1/responses", {"model": "o1", "temperature": 0.7, "max_tokens": 500})
    show(transport, "/v1/threads/thread_1/runs", {"model": "gpt-5-preview", "top_p": 0.9, "max_tokens": 256})
    show(transport, "/v1/chat/completions", {"model": "gpt-3.5", "temperature": 0.7, "max_tokens": 100})
    show(transport, "/v1/chat/completions", {"model": "House-Reasoner", "temperature": 0.2})


if __name__ == "__main__":
    main()
