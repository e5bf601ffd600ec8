from pydantic import BaseModel, ConfigDict, Field
from typing import Any, Dict, List


class _WireModel(BaseModel):
    # The realtime API speaks camelCase; accept either spelling on input
    model_config = ConfigDict(populate_by_name=True)


class FunctionCall(_WireModel):
    """A single tool invocation issued by the agent."""
    id: str = Field(..., description="Call identifier, echoed back in the response")
    name: str = Field(..., description="Declared tool/function name")
    args: Dict[str, Any] = Field(default_factory=dict, description="JSON args for the tool")


class ToolCall(_WireModel):
    """Batch of function calls delivered with one `toolcall` event."""
    function_calls: List[FunctionCall] = Field(default_factory=list, alias="functionCalls")


class ToolResult(_WireModel):
    string_value: str


class FunctionResult(_WireModel):
    result: ToolResult


class FunctionResponse(_WireModel):
    """Acknowledgement for one FunctionCall."""
    id: str
    name: str
    response: FunctionResult

    @classmethod
    def ack(cls, call: FunctionCall, text: str) -> "FunctionResponse":
        return cls(id=call.id, name=call.name, response=FunctionResult(result=ToolResult(string_value=text)))

    @property
    def result_text(self) -> str:
        return self.response.result.string_value


class ToolResponse(_WireModel):
    """Batch of acknowledgements sent back with `sendToolResponse`."""
    function_responses: List[FunctionResponse] = Field(default_factory=list, alias="functionResponses")

    def to_wire(self) -> Dict[str, Any]:
        return self.model_dump(mode="json", by_alias=True)
