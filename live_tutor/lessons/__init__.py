"""Lesson definitions and the in-process lesson registry."""

from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field, ValidationError, model_validator

from live_tutor.core.enums import LessonAction
from live_tutor.exceptions import LessonConfigError, UnknownLessonError
from live_tutor.models.lesson import Instruction, LessonSession
from live_tutor.tools import FunctionDeclaration

log = logging.getLogger(__name__)


class LessonDefinition(BaseModel):
    """Everything authored for one lesson: curriculum, agent tools and how they map to actions."""
    id: str = Field(..., min_length=1)
    title: str
    objective: str = Field("", description="One-paragraph goal given to the agent")
    instructions: List[Instruction]
    function_declarations: List[FunctionDeclaration]
    tool_actions: Dict[str, Optional[LessonAction]]
    result_overrides: Dict[str, str] = Field(default_factory=dict)
    greeting: str = "Hi, I'm ready to learn!"
    opening_utterance: str = "Start the lesson"

    @model_validator(mode="after")
    def _check_tools(self) -> "LessonDefinition":
        if not self.instructions:
            raise ValueError(f"Lesson '{self.id}' has no instructions.")
        declared = {d.name for d in self.function_declarations}
        undeclared = sorted(set(self.tool_actions) - declared)
        if undeclared:
            raise ValueError(f"Lesson '{self.id}' maps undeclared tools: {undeclared}")
        return self

    def new_session(self) -> LessonSession:
        return LessonSession.from_instructions(self.instructions)


def load_lesson(data: Dict[str, Any]) -> LessonDefinition:
    """Validate raw authored lesson data (e.g. parsed JSON)."""
    try:
        return LessonDefinition.model_validate(data)
    except ValidationError as e:
        raise LessonConfigError(f"Invalid lesson definition: {e}") from e


_REGISTRY: Dict[str, LessonDefinition] = {}


def register_lesson(lesson: LessonDefinition) -> LessonDefinition:
    if lesson.id in _REGISTRY:
        raise LessonConfigError(f"Duplicate lesson id: {lesson.id}")
    _REGISTRY[lesson.id] = lesson
    log.debug(f"Registered lesson {lesson.id} ({len(lesson.instructions)} steps)")
    return lesson


def get_lesson(lesson_id: str) -> LessonDefinition:
    try:
        return _REGISTRY[lesson_id]
    except KeyError:
        raise UnknownLessonError(lesson_id) from None


def list_lessons() -> List[LessonDefinition]:
    return list(_REGISTRY.values())


# Bundled lessons register themselves on import
from live_tutor.lessons import roblox_studio  # noqa: E402,F401
