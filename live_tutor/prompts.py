"""Agent setup payload: system instruction and tool declarations for a lesson."""

from typing import Any, Dict

from live_tutor.config import Settings
from live_tutor.lessons import LessonDefinition

LESSON_SYSTEM_PROMPT_TEMPLATE = """
In this conversation you will guide the user thru a lesson. {objective}
Use the tools provided to fulfill requests to help modify the list of the steps to follow.
Always check that the user has completed the step before going to the next one. Always call any relevant tools *before* speaking.

Follow this steps to guide the user through the lesson:

{steps}
Start the lesson when the user greets you with a simple "{greeting}".
Constantly check the users screen and describe what they are doing.
Based on the user activity, understand what they are doing and verify if their action completes the current step.
Speak as helpfully and concisely as possible. Always call any relevant tools on each of the given steps
when you think its appropriate.

By the end of the conversation, the user will have completed every step of "{title}".
After finishing the lesson, congratulate the user and close the lesson.
"""

LAST_STEP_SUFFIX = "If this is the case, move to the next step."


def format_steps(lesson: LessonDefinition) -> str:
    lines = []
    total = len(lesson.instructions)
    for index, instruction in enumerate(lesson.instructions, start=1):
        task = instruction.task.rstrip(".")
        check = instruction.verification_task.rstrip(".")
        line = f"{index}. {task}. To move on: {check}."
        if index == total:
            line += f"\n{LAST_STEP_SUFFIX}"
        lines.append(line)
    return "\n".join(lines) + "\n"


def build_system_instruction(lesson: LessonDefinition) -> str:
    return LESSON_SYSTEM_PROMPT_TEMPLATE.format(
        objective=lesson.objective,
        steps=format_steps(lesson),
        greeting=lesson.greeting,
        title=lesson.title,
    ).strip()


def build_live_config(lesson: LessonDefinition, settings: Settings) -> Dict[str, Any]:
    """Setup payload the client hands to the realtime agent before connecting."""
    return {
        "model": settings.model,
        "generationConfig": {
            "responseModalities": settings.response_modalities,
            "speechConfig": {
                "voiceConfig": {"prebuiltVoiceConfig": {"voiceName": settings.voice_name}},
            },
        },
        "systemInstruction": {"parts": [{"text": build_system_instruction(lesson)}]},
        "tools": [
            {"functionDeclarations": [d.model_dump() for d in lesson.function_declarations]},
        ],
    }
