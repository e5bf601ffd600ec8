import pytest

from live_tutor.core.enums import LessonAction
from live_tutor.fsm import transition
from live_tutor.lessons import get_lesson
from live_tutor.models.lesson import Instruction, LessonSession
from live_tutor.transport import LoopbackTransport


@pytest.fixture
def lesson():
    return get_lesson("roblox_studio_intro")


@pytest.fixture
def session(lesson):
    """Idle 7-step session."""
    return lesson.new_session()


@pytest.fixture
def started(session):
    return transition(session, LessonAction.START_LESSON)


@pytest.fixture
def three_steps():
    return LessonSession.from_instructions([
        Instruction(task=f"Task {n}", verification_task=f"Check {n}") for n in range(3)
    ])


@pytest.fixture
def transport():
    return LoopbackTransport()
