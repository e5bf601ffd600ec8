import pytest

from live_tutor.config import Settings
from live_tutor.core.enums import LessonAction, VerificationInputModality
from live_tutor.exceptions import LessonConfigError, UnknownLessonError
from live_tutor.lessons import get_lesson, list_lessons, load_lesson, register_lesson
from live_tutor.prompts import LAST_STEP_SUFFIX, build_live_config, build_system_instruction
from live_tutor.tools import DEFAULT_TOOL_ACTIONS, declarations_for


def raw_lesson(**overrides):
    data = {
        "id": "tiny",
        "title": "Tiny lesson",
        "instructions": [{"task": "Open the app.", "verification_task": "Check the app is open."}],
        "function_declarations": [{"name": "start_lesson", "description": "Start."}],
        "tool_actions": {"start_lesson": "START_LESSON"},
    }
    data.update(overrides)
    return data


def test_bundled_lesson_is_registered(lesson):
    assert lesson in list_lessons()
    assert len(lesson.instructions) == 7
    assert lesson.instructions[0].verification_input_modality == VerificationInputModality.IMAGE
    assert lesson.tool_actions["verify_step"] == LessonAction.MOVE_TO_NEXT
    assert "complete_lesson" not in lesson.tool_actions


def test_unknown_lesson():
    with pytest.raises(UnknownLessonError) as exc:
        get_lesson("does_not_exist")
    assert exc.value.lesson_id == "does_not_exist"


def test_duplicate_registration_rejected(lesson):
    with pytest.raises(LessonConfigError):
        register_lesson(lesson)


def test_load_lesson():
    tiny = load_lesson(raw_lesson())
    assert tiny.tool_actions == {"start_lesson": LessonAction.START_LESSON}
    assert tiny.new_session().instructions[0].task == "Open the app."


@pytest.mark.parametrize("overrides", [
    {"instructions": []},
    {"tool_actions": {"go_to_next_step": "MOVE_TO_NEXT"}},
    {"tool_actions": {"start_lesson": "FLY_AWAY"}},
])
def test_load_lesson_rejects_invalid(overrides):
    with pytest.raises(LessonConfigError):
        load_lesson(raw_lesson(**overrides))


def test_declarations_for_unknown_tool():
    with pytest.raises(KeyError):
        declarations_for(["start_lesson", "teleport"])


def test_default_table_covers_all_declared_tools():
    assert DEFAULT_TOOL_ACTIONS["program_opened"] is None
    assert DEFAULT_TOOL_ACTIONS["go_to_previous_step"] == LessonAction.MOVE_TO_PREVIOUS


def test_system_instruction_lists_steps_in_order(lesson):
    text = build_system_instruction(lesson)
    assert "1. Tell the user to open Roblox Studio. To move on: Check the screen and verify if Roblox Studio is opened." in text
    assert "7. End the tutorial and ask for feedback." in text
    assert text.index("1. Tell the user") < text.index("2. Explain") < text.index("7. End")
    assert text.count(LAST_STEP_SUFFIX) == 1
    assert "Hi, I'm ready to learn!" in text


def test_live_config(lesson):
    settings = Settings(model="models/test-model", voice_name="Kore")
    config = build_live_config(lesson, settings)
    assert config["model"] == "models/test-model"
    assert config["generationConfig"]["speechConfig"]["voiceConfig"]["prebuiltVoiceConfig"]["voiceName"] == "Kore"
    assert config["systemInstruction"]["parts"][0]["text"] == build_system_instruction(lesson)
    names = [d["name"] for d in config["tools"][0]["functionDeclarations"]]
    assert names == ["start_lesson", "reset_lesson", "verify_step", "go_to_next_step", "go_to_previous_step"]


def test_settings_from_env(monkeypatch):
    monkeypatch.setenv("LIVE_TUTOR_VOICE", "Charon")
    monkeypatch.setenv("LIVE_TUTOR_CORS_ORIGINS", "http://a.test, http://b.test")
    monkeypatch.setenv("LIVE_TUTOR_LOG_LEVEL", "debug")
    settings = Settings.from_env()
    assert settings.voice_name == "Charon"
    assert settings.cors_origins == ["http://a.test", "http://b.test"]
    assert settings.log_level == "DEBUG"
