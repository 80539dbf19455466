from __future__ import annotations
from collections import deque
from enum import Enum
from pydantic import BaseModel, Field
from typing import Deque, Optional, Iterator
import asyncio, websockets, time

class GestureType(str, Enum):
    BLINK = "blink"
    LEFT_WINK = "left_wink"
    RIGHT_WINK = "right_wink"

class GestureEvent(BaseModel):
    ts: float = Field(default_factory=lambda: time.time())
    type: GestureType
    left_ear: float = 0.0
    right_ear: float = 0.0
    ear: float = 0.0

class History:
    def __init__(self, maxlen:int=30):
        self.events: Deque[GestureEvent] = deque(maxlen=maxlen)
    def add(self, ev: GestureEvent):
        self.events.append(ev)
    def last(self, typ: GestureType) -> Optional[GestureEvent]:
        for e in reversed(self.events):
            if e.type == typ: return e
        return None
    def __iter__(self) -> Iterator[GestureEvent]:
        return iter(self.events)
    def __len__(self):
        return len(self.events)

async def ws_broadcast(queue: "asyncio.Queue[str]", host="0.0.0.0", port=8765):
    """Serve a WebSocket endpoint and fan every queued line out to all clients."""
    clients=set()
    async def handler(websocket):
        clients.add(websocket)
        try:
            await websocket.wait_closed()
        finally:
            clients.discard(websocket)
    async def pump():
        while True:
            msg = await queue.get()
            # a dead client must not stall the others
            await asyncio.gather(*[c.send(msg) for c in list(clients)], return_exceptions=True)
    async with websockets.serve(handler, host, port):
        await pump()
