#!/usr/bin/env python3
"""Example Starlette app with the sanitizer installed.

Run with any ASGI server, e.g. ``uvicorn examples.starlette_app:app``.
"""

from starlette.applications import Starlette
from starlette.requests import Request
from starlette.responses import JSONResponse
from starlette.routing import Route

from constrained_model_sanitizer import ConstrainedModelMiddleware, SanitizerConfig


async def echo(request: Request) -> JSONResponse:
    """Return the body the upstream provider would receive."""
    return JSONResponse(await request.json())


app = Starlette(routes=[Route("/v1/{path:path}", echo, methods=["POST"])])
app.add_middleware(ConstrainedModelMiddleware, config=SanitizerConfig.from_env())
