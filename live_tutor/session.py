"""
LessonRunner: one lesson session bound to one transport.

Owns the lesson store and the dispatcher, and ties the tool-call listener to
its own lifetime (attach on enter, detach on teardown).
"""
from __future__ import annotations

import logging
from typing import Any, Dict

from live_tutor.core.enums import LessonStatus
from live_tutor.dispatcher import ToolCallDispatcher
from live_tutor.fsm import LessonStore
from live_tutor.lessons import LessonDefinition
from live_tutor.transport import TOOLCALL_EVENT, LiveTransport

log = logging.getLogger(__name__)


class LessonRunner:
    """Drives a single lesson for one client."""

    def __init__(self, lesson: LessonDefinition, transport: LiveTransport):
        self.lesson = lesson
        self.transport = transport
        self.store = LessonStore(lesson.new_session())
        self.dispatcher = ToolCallDispatcher(
            self.store,
            transport,
            tool_actions=lesson.tool_actions,
            result_overrides=lesson.result_overrides,
        )
        self.awaiting_first_response = False
        self._attached = False

    @property
    def state(self):
        return self.store.state

    # --- Lifecycle --- #

    def attach(self) -> None:
        if self._attached:
            return
        # Registered before the dispatcher so it sees each batch first
        self.transport.on(TOOLCALL_EVENT, self._on_first_tool_call)
        self.dispatcher.attach()
        self._attached = True
        log.info(f"[LessonRunner] Attached lesson '{self.lesson.id}'")

    def detach(self) -> None:
        if not self._attached:
            return
        self.dispatcher.detach()
        self.transport.off(TOOLCALL_EVENT, self._on_first_tool_call)
        self._attached = False
        log.info(f"[LessonRunner] Detached lesson '{self.lesson.id}'")

    async def __aenter__(self) -> "LessonRunner":
        self.attach()
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        self.detach()

    async def _on_first_tool_call(self, _tool_call) -> None:
        if self.awaiting_first_response:
            log.info("[LessonRunner] First agent response received")
        self.awaiting_first_response = False

    # --- Learner actions --- #

    async def start(self) -> bool:
        """Ask the agent to begin the lesson.

        Connects the transport first if needed. Returns False without sending
        anything when the lesson is already in progress.
        """
        if self.store.state.status == LessonStatus.IN_PROGRESS:
            log.info("[LessonRunner] start() ignored, lesson already in progress")
            return False
        if not self.transport.connected:
            await self.transport.connect()
        self.awaiting_first_response = True
        await self.transport.send({"text": self.lesson.opening_utterance})
        return True

    def snapshot(self) -> Dict[str, Any]:
        session = self.store.state
        current = session.current_instruction
        return {
            "lesson_id": self.lesson.id,
            "title": self.lesson.title,
            "status": session.status.value,
            "current_index": session.current_index,
            "completed_count": session.completed_count,
            "current_task": current.task if current else None,
            "instructions": [i.model_dump(mode="json") for i in session.instructions],
            "connected": self.transport.connected,
            "awaiting_first_response": self.awaiting_first_response,
        }
