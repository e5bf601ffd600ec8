from __future__ import annotations

import json
import logging
from typing import Any, Optional

from fastapi import APIRouter, WebSocket
from starlette.websockets import WebSocketDisconnect, WebSocketState

from live_tutor.api_models import ErrorFrame, StateFrame
from live_tutor.dispatcher import parse_tool_call
from live_tutor.exceptions import TransportError, UnknownLessonError
from live_tutor.lessons import get_lesson
from live_tutor.session import LessonRunner
from live_tutor.transport import TOOLCALL_EVENT, WebSocketTransport

router = APIRouter()

log = logging.getLogger(__name__)


# Helper function to safely send JSON
async def safe_send_json(ws: WebSocket, data: Any, log_context: str = ""):
    """Attempts to send JSON data, catching errors if the socket is closed."""
    try:
        if ws.client_state == WebSocketState.CONNECTED:
            log.debug(f"safe_send_json ({log_context}): Sending data.")
            await ws.send_json(data)
        else:
            log.warning(f"safe_send_json ({log_context}): WebSocket not connected (state={ws.client_state}). Skipping send.")
    except (RuntimeError, WebSocketDisconnect) as e:
        log.warning(f"safe_send_json ({log_context}): Failed to send message, socket likely closed: {e}")


# Helper to safely close WebSocket
async def safe_close(ws: WebSocket, code: int = 1000, reason: Optional[str] = None):
    """Attempts to close the WebSocket connection gracefully."""
    try:
        if ws.client_state in (WebSocketState.CONNECTED, WebSocketState.CONNECTING):
            log.info(f"safe_close: Closing WebSocket (code={code}, reason='{reason}').")
            await ws.close(code=code, reason=reason)
    except (RuntimeError, WebSocketDisconnect) as e:
        log.warning(f"safe_close: Error during WebSocket close: {e}")


async def send_error_frame(ws: WebSocket, message: str, error_code: str, details: Optional[str] = None):
    log.warning(f"Sending error to client: Code={error_code}, Message='{message}', Details='{details}'")
    frame = ErrorFrame(error_code=error_code, message=message, details=details)
    await safe_send_json(ws, frame.model_dump(mode="json"), f"Error Frame ({error_code})")


async def send_state(ws: WebSocket, runner: LessonRunner):
    await safe_send_json(ws, StateFrame(state=runner.snapshot()).model_dump(mode="json"), "State")


@router.websocket("/ws/lesson/{lesson_id}")
async def lesson_stream(ws: WebSocket, lesson_id: str):
    """Run one lesson session over a WebSocket.

    The browser client holds the realtime agent connection and relays its
    `toolcall` events here. Inbound frames:

    * ``{"type": "toolcall", "toolCall": {"functionCalls": [...]}}``
    * ``{"type": "start"}`` - learner pressed Start
    * ``{"type": "ping"}``

    Outbound frames are ``toolResponse``, ``send``, ``connect``, ``state`` and ``error``.
    """
    await ws.accept()
    log.info(f"WebSocket: Connection accepted for lesson {lesson_id}")

    try:
        lesson = get_lesson(lesson_id)
    except UnknownLessonError as e:
        await send_error_frame(ws, str(e), "UNKNOWN_LESSON")
        await safe_close(ws, code=1008, reason="unknown lesson")
        return

    transport = WebSocketTransport(ws)
    runner = LessonRunner(lesson, transport)

    async with runner:
        await send_state(ws, runner)
        try:
            while True:
                payload_text = await ws.receive_text()
                log.debug(f"WebSocket: Received raw message for {lesson_id}: {payload_text}")
                try:
                    payload = json.loads(payload_text)
                except json.JSONDecodeError as e:
                    await send_error_frame(ws, "Message is not valid JSON.", "INVALID_PAYLOAD", details=str(e))
                    continue

                event_type = payload.get("type") if isinstance(payload, dict) else None
                if not event_type:
                    await send_error_frame(ws, "Message missing 'type' field.", "INVALID_PAYLOAD")
                    continue

                if event_type == "ping":
                    continue

                if event_type == "toolcall":
                    try:
                        tool_call = parse_tool_call(payload.get("toolCall"))
                    except ValueError as e:
                        await send_error_frame(ws, "Invalid toolcall payload.", "INVALID_PAYLOAD", details=str(e))
                        continue
                    await transport.emit(TOOLCALL_EVENT, tool_call)
                    await send_state(ws, runner)

                elif event_type == "start":
                    await runner.start()
                    await send_state(ws, runner)

                else:
                    log.warning(f"WebSocket ({lesson_id}): Unknown event type '{event_type}'")
                    await send_error_frame(ws, f"Unknown event type '{event_type}'.", "UNKNOWN_EVENT")

        except WebSocketDisconnect as e:
            transport.mark_disconnected(f"client disconnected (code={e.code})")
            log.info(f"WebSocket: Client disconnected from lesson {lesson_id}")
        except TransportError as e:
            # Delivery back to the agent failed; this interaction cannot continue
            transport.mark_disconnected(str(e))
            log.error(f"WebSocket ({lesson_id}): Transport failure, closing session: {e}")
            await safe_close(ws, code=1011, reason="transport failure")
