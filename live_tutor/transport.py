"""
Transport to the conversational agent.

The realtime agent connection itself lives outside this package. A transport
only has to connect, push an opening utterance, raise `toolcall` events and
accept the tool response batch for each of them.
"""
from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from typing import Any, Awaitable, Callable, Dict, List, Optional

from fastapi import WebSocket
from starlette.websockets import WebSocketDisconnect, WebSocketState

from live_tutor.exceptions import TransportError
from live_tutor.models.tool_calls import ToolCall, ToolResponse

log = logging.getLogger(__name__)

TOOLCALL_EVENT = "toolcall"

EventHandler = Callable[[Any], Awaitable[Any]]


class LiveTransport(ABC):
    """Base transport with an event listener registry."""

    def __init__(self):
        self._handlers: Dict[str, List[EventHandler]] = {}
        self._connected = False

    @property
    def connected(self) -> bool:
        return self._connected

    def on(self, event: str, handler: EventHandler) -> None:
        handlers = self._handlers.setdefault(event, [])
        if handler not in handlers:
            handlers.append(handler)

    def off(self, event: str, handler: EventHandler) -> None:
        handlers = self._handlers.get(event, [])
        if handler in handlers:
            handlers.remove(handler)

    def listener_count(self, event: str) -> int:
        return len(self._handlers.get(event, []))

    async def emit(self, event: str, payload: Any) -> None:
        """Await every handler for `event` in registration order."""
        for handler in list(self._handlers.get(event, [])):
            await handler(payload)

    @abstractmethod
    async def connect(self) -> None:
        ...

    @abstractmethod
    async def send(self, content: Dict[str, Any]) -> None:
        ...

    @abstractmethod
    async def send_tool_response(self, response: ToolResponse) -> None:
        ...


class LoopbackTransport(LiveTransport):
    """In-process transport that records everything sent to the agent.

    Used by the CLI simulator, where the operator plays the agent, and by tests.
    """

    def __init__(self):
        super().__init__()
        self.sent: List[Dict[str, Any]] = []
        self.tool_responses: List[ToolResponse] = []

    async def connect(self) -> None:
        self._connected = True

    async def send(self, content: Dict[str, Any]) -> None:
        if not self._connected:
            raise TransportError("Cannot send content before connecting.")
        self.sent.append(content)

    async def send_tool_response(self, response: ToolResponse) -> None:
        if not self._connected:
            raise TransportError("Cannot send tool response before connecting.")
        self.tool_responses.append(response)

    async def deliver(self, tool_call: ToolCall) -> None:
        """Simulate the agent issuing a tool-call batch."""
        await self.emit(TOOLCALL_EVENT, tool_call)


class WebSocketTransport(LiveTransport):
    """Transport relayed through a browser client over a WebSocket.

    The browser holds the realtime agent connection; it forwards `toolcall`
    events to us and relays what we send back to the agent.
    """

    def __init__(self, ws: WebSocket):
        super().__init__()
        self.ws = ws

    async def _send_json(self, data: Dict[str, Any], log_context: str) -> None:
        if self.ws.client_state != WebSocketState.CONNECTED:
            raise TransportError(f"{log_context}: WebSocket not connected (state={self.ws.client_state}).")
        try:
            log.debug(f"WebSocketTransport ({log_context}): Sending data.")
            await self.ws.send_json(data)
        except (RuntimeError, WebSocketDisconnect) as e:
            raise TransportError(f"{log_context}: failed to send, socket likely closed: {e}") from e

    async def connect(self) -> None:
        await self._send_json({"type": "connect"}, "Connect")
        self._connected = True

    async def send(self, content: Dict[str, Any]) -> None:
        await self._send_json({"type": "send", "content": content}, "Send Content")

    async def send_tool_response(self, response: ToolResponse) -> None:
        await self._send_json({"type": "toolResponse", "toolResponse": response.to_wire()}, "Tool Response")

    def mark_disconnected(self, reason: Optional[str] = None) -> None:
        if self._connected:
            log.info(f"WebSocketTransport: disconnected ({reason or 'no reason'})")
        self._connected = False
