from live_tutor.models.lesson import Instruction, LessonSession
from live_tutor.models.tool_calls import (
    FunctionCall, FunctionResponse, FunctionResult, ToolCall, ToolResponse, ToolResult
)

__all__ = [
    "Instruction", "LessonSession",
    "FunctionCall", "FunctionResponse", "FunctionResult", "ToolCall", "ToolResponse", "ToolResult",
]
