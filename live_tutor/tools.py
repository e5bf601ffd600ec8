"""Tool names the agent may call, and how each maps onto a lesson action."""

from __future__ import annotations

from enum import Enum
from typing import Dict, List, Mapping, Optional

from pydantic import BaseModel, Field

from live_tutor.core.enums import LessonAction


class ToolName(str, Enum):
    START_LESSON        = "start_lesson"
    RESET_LESSON        = "reset_lesson"
    COMPLETE_LESSON     = "complete_lesson"
    VERIFY_STEP         = "verify_step"
    GO_TO_NEXT_STEP     = "go_to_next_step"
    GO_TO_PREVIOUS_STEP = "go_to_previous_step"
    PROGRAM_OPENED      = "program_opened"


# Tool name -> action. None means the call is acknowledged without touching the lesson.
ToolActionTable = Mapping[str, Optional[LessonAction]]

DEFAULT_TOOL_ACTIONS: Dict[str, Optional[LessonAction]] = {
    ToolName.START_LESSON.value: LessonAction.START_LESSON,
    ToolName.RESET_LESSON.value: LessonAction.RESET_LESSON,
    ToolName.COMPLETE_LESSON.value: LessonAction.COMPLETE_LESSON,
    ToolName.VERIFY_STEP.value: LessonAction.MOVE_TO_NEXT,
    ToolName.GO_TO_NEXT_STEP.value: LessonAction.MOVE_TO_NEXT,
    ToolName.GO_TO_PREVIOUS_STEP.value: LessonAction.MOVE_TO_PREVIOUS,
    ToolName.PROGRAM_OPENED.value: None,
}


class FunctionDeclaration(BaseModel):
    """Declaration of a tool, as sent to the agent in its setup payload."""
    name: str = Field(..., description="Tool/function name the agent will call")
    description: str = Field(..., description="When the agent should call it")


DEFAULT_FUNCTION_DECLARATIONS: List[FunctionDeclaration] = [
    FunctionDeclaration(
        name=ToolName.START_LESSON.value,
        description="The user says 'Hi, I'm ready to learn!'. Start the lesson.",
    ),
    FunctionDeclaration(name=ToolName.RESET_LESSON.value, description="Resets the lesson."),
    FunctionDeclaration(
        name=ToolName.COMPLETE_LESSON.value,
        description="Marks every step as completed and closes the lesson.",
    ),
    FunctionDeclaration(
        name=ToolName.VERIFY_STEP.value,
        description="Check the user screen to verify if the current step has been completed.",
    ),
    FunctionDeclaration(
        name=ToolName.GO_TO_NEXT_STEP.value,
        description="Marks the current step as completed and moves to the next step of the lesson.",
    ),
    FunctionDeclaration(
        name=ToolName.GO_TO_PREVIOUS_STEP.value,
        description="Moves to the previous step of the lesson.",
    ),
    FunctionDeclaration(
        name=ToolName.PROGRAM_OPENED.value,
        description="Call when you see on the user screen that the program has been opened.",
    ),
]


def declarations_for(names: List[str]) -> List[FunctionDeclaration]:
    """Pick the default declarations for the given tool names, keeping their order."""
    by_name = {d.name: d for d in DEFAULT_FUNCTION_DECLARATIONS}
    missing = [n for n in names if n not in by_name]
    if missing:
        raise KeyError(f"No default declaration for tools: {missing}")
    return [by_name[n] for n in names]


def actions_for(names: List[str]) -> Dict[str, Optional[LessonAction]]:
    """Slice of DEFAULT_TOOL_ACTIONS for the given tool names."""
    return {n: DEFAULT_TOOL_ACTIONS[n] for n in names}
