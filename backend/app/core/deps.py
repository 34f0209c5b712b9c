from typing import Iterator

import httpx
from fastapi import Request

from app.clients.tools import make_client
from app.core.context import AppContext


def get_context(request: Request) -> AppContext:
    return request.app.state.context


def get_tools_client(request: Request) -> Iterator[httpx.Client]:
    ctx: AppContext = request.app.state.context
    transport = getattr(request.app.state, "tools_transport", None)
    with make_client(ctx.config, transport=transport) as client:
        yield client
