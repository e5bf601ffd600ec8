"""Introductory lesson for the Roblox Studio editor: models plus the Move, Scale and Rotate tools."""

from live_tutor.core.enums import VerificationInputModality
from live_tutor.lessons import LessonDefinition, register_lesson
from live_tutor.models.lesson import Instruction
from live_tutor.tools import ToolName, actions_for, declarations_for

_IMAGE = VerificationInputModality.IMAGE
_AUDIO = VerificationInputModality.AUDIO

INSTRUCTIONS = [
    Instruction(
        task="Tell the user to open Roblox Studio.",
        verification_task="Check the screen and verify if Roblox Studio is opened.",
        verification_input_modality=_IMAGE,
    ),
    Instruction(
        task="Explain to the user how to create a new world in Roblox Studio using the baseplate template.",
        verification_task="Check the screen to verify if the baseplate template is visible.",
        verification_input_modality=_IMAGE,
    ),
    Instruction(
        task="Explain to the user how to create a new object in Roblox Studio.",
        verification_task="Check the screen to see if there is a new object in the Roblox Studio editor.",
        verification_input_modality=_IMAGE,
    ),
    Instruction(
        task="Explain to the user how to move the new object.",
        verification_task="Check the screen and verify if the user moved the object.",
        verification_input_modality=_IMAGE,
    ),
    Instruction(
        task="Explain to the user how to scale the new object.",
        verification_task="Check the screen and verify if the user scaled the object.",
        verification_input_modality=_IMAGE,
    ),
    Instruction(
        task="Explain to the user how to rotate the new object.",
        verification_task="Check the screen and verify if the user rotated the object.",
        verification_input_modality=_IMAGE,
    ),
    Instruction(
        task="End the tutorial and ask for feedback.",
        verification_task="Verify if the user has given feedback about the tutorial.",
        verification_input_modality=_AUDIO,
    ),
]

TOOLS = [
    ToolName.START_LESSON.value,
    ToolName.RESET_LESSON.value,
    ToolName.VERIFY_STEP.value,
    ToolName.GO_TO_NEXT_STEP.value,
    ToolName.GO_TO_PREVIOUS_STEP.value,
]

LESSON = register_lesson(LessonDefinition(
    id="roblox_studio_intro",
    title="Roblox Studio: first steps",
    objective=(
        "Familiarize the user with the Roblox Studio interface. The objective of this lesson is to "
        "briefly explain how to add new models and how to use the Move, Scale, and Rotate tools "
        "to manipulate the objects in the scene."
    ),
    instructions=INSTRUCTIONS,
    function_declarations=declarations_for(TOOLS),
    tool_actions=actions_for(TOOLS),
    result_overrides={ToolName.VERIFY_STEP.value: "Step verified"},
))
