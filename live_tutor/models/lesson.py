from __future__ import annotations

from datetime import datetime
from typing import List, Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field

from live_tutor.core.enums import (
    InstructionStatus, LessonStatus, VerificationInputModality
)

ACTIVE_STATUSES = (InstructionStatus.IN_PROGRESS, InstructionStatus.WAITING_RESPONSE)


class Instruction(BaseModel):
    """One step of a lesson: what the learner does and how the agent checks it."""
    model_config = ConfigDict(frozen=True)

    task: str = Field(..., description="What the agent should get the learner to do.")
    verification_task: str = Field(..., description="How the agent confirms the step is done.")
    verification_input_modality: Optional[VerificationInputModality] = None
    status: InstructionStatus = InstructionStatus.IDLE
    # Only set when the instruction transitions into COMPLETED
    completed_at: Optional[datetime] = None

    @property
    def is_active(self) -> bool:
        return self.status in ACTIVE_STATUSES


class LessonSession(BaseModel):
    """Immutable snapshot of a lesson's progress.

    The instruction order defines the curriculum and never changes after
    creation. New snapshots are produced by ``live_tutor.fsm.transition``.
    """
    model_config = ConfigDict(frozen=True)

    instructions: Tuple[Instruction, ...] = ()
    status: LessonStatus = LessonStatus.IDLE
    current_index: int = Field(0, ge=0)

    @classmethod
    def from_instructions(cls, instructions: List[Instruction]) -> "LessonSession":
        """Fresh idle session over the given curriculum."""
        return cls(instructions=tuple(instructions))

    @property
    def current_instruction(self) -> Optional[Instruction]:
        if self.status == LessonStatus.IDLE or not self.instructions:
            return None
        return self.instructions[self.current_index]

    @property
    def completed_count(self) -> int:
        return sum(1 for i in self.instructions if i.status == InstructionStatus.COMPLETED)

    @property
    def is_active(self) -> bool:
        return self.status in (LessonStatus.IN_PROGRESS, LessonStatus.WAITING_RESPONSE)

    def active_instructions(self) -> List[int]:
        """Indices of instructions currently IN_PROGRESS or WAITING_RESPONSE."""
        return [idx for idx, i in enumerate(self.instructions) if i.is_active]
