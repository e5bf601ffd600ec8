"""
Lesson progression state machine.

`transition` is the only way a LessonSession changes. It is pure: it never
mutates its input and returns either a new session or the same one when the
action does not apply in the current state.
"""
from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Callable, List, Optional

from live_tutor.core.enums import InstructionStatus, LessonAction, LessonStatus
from live_tutor.models.lesson import Instruction, LessonSession

log = logging.getLogger(__name__)

ChangeListener = Callable[[LessonSession, LessonSession], None]


# --- Instruction helpers --- #

def _mark_idle(instruction: Instruction) -> Instruction:
    return instruction.model_copy(update={"status": InstructionStatus.IDLE, "completed_at": None})

def _mark_in_progress(instruction: Instruction) -> Instruction:
    return instruction.model_copy(update={"status": InstructionStatus.IN_PROGRESS, "completed_at": None})

def _mark_waiting(instruction: Instruction) -> Instruction:
    return instruction.model_copy(update={"status": InstructionStatus.WAITING_RESPONSE})

def _mark_completed(instruction: Instruction, now: datetime) -> Instruction:
    return instruction.model_copy(update={"status": InstructionStatus.COMPLETED, "completed_at": now})


# --- Session transitions --- #

def _start_lesson(session: LessonSession, now: datetime) -> LessonSession:
    instructions = []
    for index, instruction in enumerate(session.instructions):
        if index == 0:
            instructions.append(_mark_in_progress(instruction))
        elif instruction.status != InstructionStatus.IDLE:
            instructions.append(_mark_idle(instruction))
        else:
            instructions.append(instruction)
    return session.model_copy(update={
        "instructions": tuple(instructions),
        "status": LessonStatus.IN_PROGRESS,
        "current_index": 0,
    })


def _reset_lesson(session: LessonSession, now: datetime) -> LessonSession:
    return session.model_copy(update={
        "instructions": tuple(_mark_idle(i) for i in session.instructions),
        "status": LessonStatus.IDLE,
        "current_index": 0,
    })


def _complete_lesson(session: LessonSession, now: datetime) -> LessonSession:
    # Steps finished earlier keep their own timestamp; skipped ones get `now`
    instructions = tuple(
        i if i.status == InstructionStatus.COMPLETED else _mark_completed(i, now)
        for i in session.instructions
    )
    return session.model_copy(update={"instructions": instructions, "status": LessonStatus.COMPLETED})


def _move_to_next(session: LessonSession, now: datetime) -> LessonSession:
    if not session.is_active:
        return session

    current = session.current_index
    following = current + 1
    instructions = list(session.instructions)
    instructions[current] = _mark_completed(instructions[current], now)

    if following >= len(instructions):
        # Past the last step: the lesson is done, the index stays on the last step
        return session.model_copy(update={
            "instructions": tuple(instructions),
            "status": LessonStatus.COMPLETED,
        })

    instructions[following] = _mark_in_progress(instructions[following])
    return session.model_copy(update={
        "instructions": tuple(instructions),
        "status": LessonStatus.IN_PROGRESS,
        "current_index": following,
    })


def _move_to_previous(session: LessonSession, now: datetime) -> LessonSession:
    if not session.is_active:
        return session

    previous = session.current_index - 1
    if previous <= 0:
        # Going back from the first two steps restarts the lesson from scratch
        return _reset_lesson(session, now)

    instructions = list(session.instructions)
    instructions[session.current_index] = _mark_idle(instructions[session.current_index])
    instructions[previous] = _mark_in_progress(instructions[previous])
    return session.model_copy(update={
        "instructions": tuple(instructions),
        "status": LessonStatus.IN_PROGRESS,
        "current_index": previous,
    })


def _wait_for_response(session: LessonSession, now: datetime) -> LessonSession:
    if session.status != LessonStatus.IN_PROGRESS:
        return session
    instructions = tuple(
        _mark_waiting(i) if i.status == InstructionStatus.IN_PROGRESS else i
        for i in session.instructions
    )
    return session.model_copy(update={"instructions": instructions, "status": LessonStatus.WAITING_RESPONSE})


_TRANSITIONS = {
    LessonAction.START_LESSON: _start_lesson,
    LessonAction.RESET_LESSON: _reset_lesson,
    LessonAction.COMPLETE_LESSON: _complete_lesson,
    LessonAction.MOVE_TO_NEXT: _move_to_next,
    LessonAction.MOVE_TO_PREVIOUS: _move_to_previous,
    LessonAction.WAIT_FOR_RESPONSE: _wait_for_response,
}


def transition(session: LessonSession, action, now: Optional[datetime] = None) -> LessonSession:
    """Apply `action` to `session` and return the resulting session.

    Unrecognised actions, and actions that have no meaning in the current
    state, return `session` unchanged. An empty lesson never leaves IDLE.
    """
    try:
        action = LessonAction(action)
    except ValueError:
        return session
    if not session.instructions:
        return session
    handler = _TRANSITIONS[action]
    return handler(session, now or datetime.now(timezone.utc))


def check_invariants(session: LessonSession) -> None:
    """Assert the structural invariants of a session. Intended for tests."""
    active = session.active_instructions()
    assert len(active) <= 1, f"More than one active instruction: {active}"
    if session.instructions:
        assert 0 <= session.current_index < len(session.instructions), \
            f"current_index {session.current_index} out of range"
    if session.status == LessonStatus.IDLE:
        assert session.current_index == 0
        assert not active
    if session.is_active:
        assert active == [session.current_index], \
            f"Active instruction {active} does not match current_index {session.current_index}"
    for instruction in session.instructions:
        if instruction.status != InstructionStatus.COMPLETED:
            assert instruction.completed_at is None


class LessonStore:
    """Owns the single mutable handle to a LessonSession.

    Only the dispatcher and the learner-initiated start path write to it.
    """
    def __init__(self, session: LessonSession):
        self._session = session
        self._listeners: List[ChangeListener] = []

    @property
    def state(self) -> LessonSession:
        return self._session

    def dispatch(self, action: LessonAction) -> LessonSession:
        """Apply one action, replace the held session and notify listeners on change."""
        previous = self._session
        current = transition(previous, action)
        label = getattr(action, "value", action)
        if current is previous:
            log.info(f"[LessonStore] {label} ignored in state {previous.status.value}")
            return current

        self._session = current
        log.info(
            f"[LessonStore] {label}: {previous.status.value} -> {current.status.value} "
            f"(step {previous.current_index} -> {current.current_index})"
        )
        for listener in list(self._listeners):
            listener(previous, current)
        return current

    def reset(self) -> LessonSession:
        """Shorthand for dispatching RESET_LESSON."""
        return self.dispatch(LessonAction.RESET_LESSON)

    def subscribe(self, listener: ChangeListener) -> None:
        if listener not in self._listeners:
            self._listeners.append(listener)

    def unsubscribe(self, listener: ChangeListener) -> None:
        if listener in self._listeners:
            self._listeners.remove(listener)
