from pydantic import BaseModel, Field
from typing import Any, Dict, List, Literal, Optional

from live_tutor.lessons import LessonDefinition

# --- Response Models ---

class LessonSummary(BaseModel):
    id: str
    title: str
    step_count: int
    tools: List[str]

    @classmethod
    def from_lesson(cls, lesson: LessonDefinition) -> "LessonSummary":
        return cls(
            id=lesson.id,
            title=lesson.title,
            step_count=len(lesson.instructions),
            tools=[d.name for d in lesson.function_declarations],
        )

class LessonListResponse(BaseModel):
    lessons: List[LessonSummary]

class ErrorResponse(BaseModel):
    """For error messages and exceptional cases."""
    response_type: Literal["error"] = "error"
    message: str
    error_code: Optional[str] = None
    details: Optional[dict] = None
    model_config = {"extra": "forbid"}

# --- WebSocket frames (server -> client) ---

class StateFrame(BaseModel):
    type: Literal["state"] = "state"
    state: Dict[str, Any]

class ErrorFrame(BaseModel):
    type: Literal["error"] = "error"
    error_code: str
    message: str
    details: Optional[str] = Field(None, description="Technical details, if any")
