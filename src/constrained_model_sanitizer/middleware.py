"""ASGI middleware that sanitizes constrained-model request bodies.

Usage with Starlette or FastAPI:

    from constrained_model_sanitizer import ConstrainedModelMiddleware, SanitizerConfig

    app.add_middleware(ConstrainedModelMiddleware, config=SanitizerConfig.from_env())

The body is buffered in full, passed through :class:`BodyTransport`, and
replayed to the wrapped app as a single ``http.request`` message. The
``content-length`` header is updated to match the replayed bytes.
"""

from typing import List, Optional, Tuple

from starlette.types import ASGIApp, Message, Receive, Scope, Send

from .config import SanitizerConfig
from .logging import LogEvent, log_debug
from .routes import EndpointFamily
from .rules import RuleSet, get_default_rules
from .transport import BodyTransport, TransportOutcome, TransportResult

_BODY_FRAMING_HEADERS = (b"content-length", b"transfer-encoding")


def replace_content_length(scope: Scope, length: int) -> Scope:
    """Return a copy of ``scope`` whose headers declare ``length`` bytes.

    ``transfer-encoding`` is dropped because the body is replayed in full.
    """
    headers = [
        (name, value)
        for name, value in scope.get("headers", [])
        if name.lower() not in _BODY_FRAMING_HEADERS
    ]
    headers.append((b"content-length", str(length).encode("latin-1")))
    new_scope = dict(scope)
    new_scope["headers"] = headers
    return new_scope


async def read_body(receive: Receive) -> Tuple[bytes, Optional[Message]]:
    """Drain all ``http.request`` messages from ``receive``.

    Returns:
        The concatenated body, and the terminating message if the client
        disconnected before the body was complete (None otherwise)
    """
    chunks: List[bytes] = []
    while True:
        message = await receive()
        if message["type"] != "http.request":
            return b"".join(chunks), message
        chunks.append(message.get("body", b""))
        if not message.get("more_body", False):
            return b"".join(chunks), None


class ConstrainedModelMiddleware:
    """Rewrite generation requests that target constrained models."""

    def __init__(
        self,
        app: ASGIApp,
        config: Optional[SanitizerConfig] = None,
        rules: Optional[RuleSet] = None,
    ) -> None:
        """Initialize the middleware.

        Args:
            app: Wrapped ASGI application
            config: Fixed configuration; None re-reads the environment per request
            rules: Classification tables; None loads the default rules now,
                so a broken rules file fails at start-up rather than per request
        """
        self.app = app
        self.transport = BodyTransport(config=config, rules=rules or get_default_rules())

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        if scope["type"] != "http":
            await self.app(scope, receive, send)
            return

        path = scope.get("path", "")
        method = scope.get("method", "")
        family = self.transport.classify(method, path)
        if family is EndpointFamily.NOT_APPLICABLE:
            await self.app(scope, receive, send)
            return

        raw, terminal = await read_body(receive)
        if terminal is None:
            result = self.transport.process(method, path, raw)
        else:
            log_debug(
                LogEvent.BODY_TRANSPORT,
                "Client disconnected while sending body, passing through",
                path=path,
            )
            result = TransportResult(raw, TransportOutcome.READ_ERROR, family)

        await self.app(
            replace_content_length(scope, result.content_length),
            self._replay(result.body, terminal, receive),
            send,
        )

    @staticmethod
    def _replay(body: bytes, terminal: Optional[Message], receive: Receive) -> Receive:
        """Build a ``receive`` callable that yields ``body`` exactly once."""
        pending: List[Message] = [{"type": "http.request", "body": body, "more_body": False}]
        if terminal is not None:
            pending.append(terminal)

        async def replay() -> Message:
            if pending:
                return pending.pop(0)
            return await receive()

        return replay
