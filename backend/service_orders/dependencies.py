"""Request-scoped accessors for the collaborators wired in the application lifespan."""
from fastapi import Request, WebSocket

from .services.change_feed import ChangeFeed
from .use_cases.order_dispatch import OrderDispatcher


def get_dispatcher(request: Request) -> OrderDispatcher:
    return request.app.state.dispatcher


def get_change_feed(websocket: WebSocket) -> ChangeFeed:
    return websocket.app.state.change_feed
