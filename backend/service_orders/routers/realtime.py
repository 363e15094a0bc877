"""WebSocket stream of committed changes for one table."""
import asyncio
import logging

from fastapi import APIRouter, Depends, WebSocket, WebSocketDisconnect, status

from ..dependencies import get_change_feed
from ..services.change_feed import ChangeFeed

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/realtime", tags=["realtime"])


async def _wait_for_disconnect(websocket: WebSocket) -> None:
    try:
        while True:
            await websocket.receive_text()
    except WebSocketDisconnect:
        pass


@router.websocket("/{table}")
async def stream_changes(websocket: WebSocket, table: str, feed: ChangeFeed = Depends(get_change_feed)):
    """Push ``{eventType, table, id, record}`` for every committed change on ``table``."""
    if table not in feed.tables:
        await websocket.close(code=status.WS_1008_POLICY_VIOLATION)
        return

    await websocket.accept()
    loop = asyncio.get_running_loop()
    queue: asyncio.Queue = asyncio.Queue()
    # Commits happen on worker threads; hand events over to this loop.
    unsubscribe = feed.subscribe(lambda change: loop.call_soon_threadsafe(queue.put_nowait, change), table=table)
    closed = asyncio.create_task(_wait_for_disconnect(websocket))
    logger.info("realtime.join table=%s", table)

    try:
        while True:
            getter = asyncio.create_task(queue.get())
            done, _ = await asyncio.wait({getter, closed}, return_when=asyncio.FIRST_COMPLETED)
            if closed in done:
                getter.cancel()
                break
            await websocket.send_json(getter.result().as_dict())
    finally:
        unsubscribe()
        closed.cancel()
        logger.info("realtime.leave table=%s", table)
