"""
Tool-call dispatcher: turns agent tool calls into lesson transitions and
acknowledges every call back to the agent.
"""
from __future__ import annotations

import logging
from typing import Any, Dict, Mapping, Optional, Union

from pydantic import ValidationError

from live_tutor.core.enums import LessonAction
from live_tutor.exceptions import TransportError
from live_tutor.fsm import LessonStore
from live_tutor.models.tool_calls import FunctionCall, FunctionResponse, ToolCall, ToolResponse
from live_tutor.telemetry import log_dispatch
from live_tutor.tools import DEFAULT_TOOL_ACTIONS, ToolActionTable
from live_tutor.transport import TOOLCALL_EVENT, LiveTransport

log = logging.getLogger(__name__)


def default_result_text(tool_name: str) -> str:
    return f"{tool_name} OK."


class ToolCallDispatcher:
    """Maps named tool calls to lesson actions and answers each batch exactly once.

    Unknown tool names are acknowledged like any other call but leave the
    lesson untouched; the agent may call tools we do not track.
    """

    def __init__(
        self,
        store: LessonStore,
        transport: LiveTransport,
        tool_actions: Optional[ToolActionTable] = None,
        result_overrides: Optional[Mapping[str, str]] = None,
    ):
        self.store = store
        self.transport = transport
        self.tool_actions: Dict[str, Optional[LessonAction]] = dict(
            DEFAULT_TOOL_ACTIONS if tool_actions is None else tool_actions
        )
        self.result_overrides: Dict[str, str] = dict(result_overrides or {})
        self._attached = False

    # --- Listener lifecycle --- #

    @property
    def attached(self) -> bool:
        return self._attached

    def attach(self) -> None:
        if not self._attached:
            self.transport.on(TOOLCALL_EVENT, self.on_tool_call)
            self._attached = True

    def detach(self) -> None:
        if self._attached:
            self.transport.off(TOOLCALL_EVENT, self.on_tool_call)
            self._attached = False

    async def __aenter__(self) -> "ToolCallDispatcher":
        self.attach()
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        self.detach()

    # --- Dispatch --- #

    def handle_call(self, call: FunctionCall) -> FunctionResponse:
        """Apply one call to the lesson and build its acknowledgement."""
        action = self.tool_actions.get(call.name)
        if action is not None:
            self.store.dispatch(action)
        elif call.name in self.tool_actions:
            log.info(f"[Dispatcher] '{call.name}' ({call.id}) is informational, no transition")
        else:
            log.info(f"[Dispatcher] Unknown tool '{call.name}' ({call.id}), acknowledging without transition")
        text = self.result_overrides.get(call.name, default_result_text(call.name))
        return FunctionResponse.ack(call, text)

    def build_response(self, tool_call: ToolCall) -> ToolResponse:
        return ToolResponse(function_responses=[self.handle_call(c) for c in tool_call.function_calls])

    @log_dispatch
    async def on_tool_call(self, tool_call: Union[ToolCall, Dict[str, Any]]) -> Optional[ToolResponse]:
        """Handle one `toolcall` event and deliver the acknowledgement batch.

        Every transition for the batch is applied before the single send, so
        batches are processed whole and in arrival order. Transport failures
        are not retried; they propagate as TransportError.
        """
        if not isinstance(tool_call, ToolCall):
            tool_call = parse_tool_call(tool_call)
        if not tool_call.function_calls:
            log.debug("[Dispatcher] Empty tool-call batch, nothing to acknowledge")
            return None

        response = self.build_response(tool_call)
        try:
            await self.transport.send_tool_response(response)
        except TransportError:
            log.error("[Dispatcher] Failed to deliver tool response batch", exc_info=True)
            raise
        except Exception as e:
            log.error(f"[Dispatcher] Failed to deliver tool response batch: {e}", exc_info=True)
            raise TransportError(f"Tool response delivery failed: {e}") from e
        return response


def parse_tool_call(payload: Any) -> ToolCall:
    """Validate a raw `toolcall` payload; raises ValueError with a readable message."""
    try:
        return ToolCall.model_validate(payload)
    except ValidationError as e:
        raise ValueError(f"Invalid toolcall payload: {e}") from e
