from typing import Dict, List
from fastapi import WebSocket
import asyncio
import json

class ConnectionManager:
    """Open notification sockets per user."""

    def __init__(self):
        self.active: Dict[str, List[WebSocket]] = {}
        self.lock = asyncio.Lock()

    async def connect(self, user_id: str, websocket: WebSocket):
        await websocket.accept()
        async with self.lock:
            self.active.setdefault(str(user_id), []).append(websocket)

    async def disconnect(self, user_id: str, websocket: WebSocket):
        async with self.lock:
            conns = self.active.get(str(user_id), [])
            if websocket in conns:
                conns.remove(websocket)
            if not conns:
                self.active.pop(str(user_id), None)

    def connection_count(self, user_id) -> int:
        return len(self.active.get(str(user_id), []))

    async def send_personal_message(self, user_id, message: dict) -> int:
        """Send to every socket of the user; returns how many received it."""
        conns = self.active.get(str(user_id), [])
        data = json.dumps(message, default=str)
        delivered = 0
        for ws in list(conns):
            try:
                await ws.send_text(data)
                delivered += 1
            except Exception:
                # broken socket, drop it
                await self.disconnect(user_id, ws)
        return delivered

manager = ConnectionManager()
