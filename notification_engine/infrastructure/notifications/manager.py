"""Registry of websockets held open by users watching their inbox."""

from __future__ import annotations

import logging
from typing import Any

from fastapi import WebSocket

logger = logging.getLogger(__name__)


class InboxConnections:
    """Open inbox sockets per user id; one user may hold several tabs."""

    def __init__(self) -> None:
        self._sockets: dict[int, list[WebSocket]] = {}

    async def register(self, user_id: int, websocket: WebSocket) -> None:
        await websocket.accept()
        self._sockets.setdefault(user_id, []).append(websocket)
        logger.debug("User %s opened an inbox socket (%s open)", user_id, self.count(user_id))

    def unregister(self, user_id: int, websocket: WebSocket) -> None:
        sockets = self._sockets.get(user_id, [])
        if websocket in sockets:
            sockets.remove(websocket)
        if not sockets:
            self._sockets.pop(user_id, None)

    def count(self, user_id: int) -> int:
        return len(self._sockets.get(user_id, ()))

    async def push(self, user_id: int, message: dict[str, Any]) -> int:
        """Send ``message`` to each socket of ``user_id``; return how many got it."""

        delivered = 0
        for websocket in tuple(self._sockets.get(user_id, ())):
            try:
                await websocket.send_json(message)
            except Exception:  # closed sockets raise transport-specific errors
                logger.debug("Dropping broken inbox socket of user %s", user_id)
                self.unregister(user_id, websocket)
            else:
                delivered += 1
        return delivered


inbox_connections = InboxConnections()


__all__ = ["InboxConnections", "inbox_connections"]
