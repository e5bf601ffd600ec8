import json
from datetime import datetime
from typing import Any, Dict, List, Optional

from live_tutor.models.lesson import LessonSession
from live_tutor.models.tool_calls import ToolCall, ToolResponse


class LessonOutputLogger:
    """Transcript of one lesson session: tool calls, acknowledgements and state changes."""

    def __init__(self, output_file: Optional[str] = None):
        """Initialize the logger with an optional output file path.

        Args:
            output_file: Path to output file. If None, generates a default name.
        """
        if output_file is None:
            timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")
            output_file = f"live_tutor_session_{timestamp}.txt"

        self.output_file = output_file
        self.started_at = datetime.now().isoformat()
        self.entries: List[Dict[str, Any]] = []

    def log_tool_call(self, tool_call: ToolCall) -> None:
        self._append("Agent Tool Call", tool_call)

    def log_tool_response(self, response: ToolResponse) -> None:
        self._append("Tool Response", response)

    def log_state_change(self, previous: LessonSession, current: LessonSession) -> None:
        """LessonStore change listener."""
        summary = (
            f"{previous.status.value} -> {current.status.value}, "
            f"step {previous.current_index + 1} -> {current.current_index + 1} "
            f"({current.completed_count}/{len(current.instructions)} completed)"
        )
        self._append("Lesson State", summary)

    def _format_output(self, output: Any) -> str:
        if output is None:
            return "None"
        if hasattr(output, "model_dump"):
            return json.dumps(output.model_dump(mode="json", by_alias=True), indent=2)
        return str(output)

    def _append(self, source: str, output: Any) -> None:
        self.entries.append({
            "timestamp": datetime.now().isoformat(),
            "source": source,
            "output": self._format_output(output),
        })

    def save(self) -> str:
        """Save the transcript to the output file.

        Returns:
            Path to the saved file.
        """
        with open(self.output_file, "w", encoding="utf-8") as f:
            f.write("=" * 80 + "\n")
            f.write(f"LIVE TUTOR SESSION LOG - {self.started_at}\n")
            f.write("=" * 80 + "\n\n")
            for entry in self.entries:
                f.write(f"[{entry['timestamp']}] {entry['source']}\n")
                f.write("-" * 80 + "\n")
                f.write(entry["output"])
                f.write("\n\n")
        return self.output_file
