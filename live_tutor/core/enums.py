"""
Status and action enums shared by the lesson state machine and the tool-call dispatcher.
"""
from enum import Enum

class LessonStatus(str, Enum):
    """Session-level lesson status."""
    IDLE             = "IDLE"
    IN_PROGRESS      = "IN_PROGRESS"
    WAITING_RESPONSE = "WAITING_RESPONSE"  # agent is verifying the current step
    COMPLETED        = "COMPLETED"

class InstructionStatus(str, Enum):
    """Per-instruction status."""
    IDLE             = "IDLE"
    IN_PROGRESS      = "IN_PROGRESS"
    WAITING_RESPONSE = "WAITING_RESPONSE"
    COMPLETED        = "COMPLETED"

class VerificationInputModality(str, Enum):
    """Evidence channel the agent uses to confirm a step."""
    TEXT  = "TEXT"
    AUDIO = "AUDIO"
    IMAGE = "IMAGE"

class LessonAction(str, Enum):
    """Discrete actions accepted by fsm.transition"""
    START_LESSON      = "START_LESSON"
    RESET_LESSON      = "RESET_LESSON"
    COMPLETE_LESSON   = "COMPLETE_LESSON"
    MOVE_TO_NEXT      = "MOVE_TO_NEXT"
    MOVE_TO_PREVIOUS  = "MOVE_TO_PREVIOUS"
    WAIT_FOR_RESPONSE = "WAIT_FOR_RESPONSE"
