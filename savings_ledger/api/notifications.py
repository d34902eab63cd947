"""
Real-time notification endpoint.

A client connects to /ws?token=<access token> and is joined to
its own user's channel. Every ledger or withdrawal-request change
for that user arrives as a JSON message {"event", "data"}.

Publishers run in worker threads, so messages cross into the
connection's event loop through call_soon_threadsafe. Each connection
queues a bounded number of messages; a client that stops reading
loses new messages instead of growing the queue.
"""

import asyncio
import uuid
from typing import Callable

from fastapi import APIRouter, Depends, WebSocket, WebSocketDisconnect, status

from savings_ledger.config import get_settings
from savings_ledger.errors import InvalidTokenError
from savings_ledger.logging_config import get_logger
from savings_ledger.services.notifier import ChangeNotifier, get_notifier
from savings_ledger.services.tokens import decode_access_token

logger = get_logger("ws")

router = APIRouter(tags=["Notifications"])


def bounded_delivery(
    loop: asyncio.AbstractEventLoop,
    queue: asyncio.Queue,
    user_id: uuid.UUID,
) -> Callable[[dict], None]:
    """Subscriber callback that hands messages to the loop's queue."""

    def enqueue(message: dict) -> None:
        try:
            queue.put_nowait(message)
        except asyncio.QueueFull:
            logger.warning(
                "Client is not keeping up, dropping %s", message["event"],
                extra={"user_id": str(user_id), "event": message["event"]},
            )

    def deliver(message: dict) -> None:
        loop.call_soon_threadsafe(enqueue, message)

    return deliver


@router.websocket("/ws")
async def notifications(
    websocket: WebSocket,
    token: str | None = None,
    notifier: ChangeNotifier = Depends(get_notifier),
):
    try:
        user_id = decode_access_token(token or "")
    except InvalidTokenError:
        await websocket.close(code=status.WS_1008_POLICY_VIOLATION)
        return

    queue: asyncio.Queue = asyncio.Queue(
        maxsize=get_settings().WS_MAX_PENDING_MESSAGES
    )
    deliver = bounded_delivery(asyncio.get_running_loop(), queue, user_id)
    leave = notifier.subscribe(user_id, deliver)
    await websocket.accept()
    logger.info("Client joined", extra={"user_id": str(user_id)})

    async def send_messages():
        while True:
            await websocket.send_json(await queue.get())

    async def wait_for_disconnect():
        # Client messages carry nothing; reading only detects the close
        while True:
            await websocket.receive_text()

    sender = asyncio.create_task(send_messages())
    receiver = asyncio.create_task(wait_for_disconnect())
    try:
        done, pending = await asyncio.wait(
            {sender, receiver}, return_when=asyncio.FIRST_COMPLETED
        )
        for task in pending:
            task.cancel()
        for task in done:
            error = task.exception()
            if error is not None and not isinstance(error, WebSocketDisconnect):
                raise error
    finally:
        leave()
        logger.info("Client left", extra={"user_id": str(user_id)})
