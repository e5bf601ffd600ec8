import pytest
from unittest.mock import AsyncMock

from live_tutor.core.enums import InstructionStatus, LessonAction, LessonStatus
from live_tutor.dispatcher import ToolCallDispatcher, parse_tool_call
from live_tutor.exceptions import TransportError
from live_tutor.fsm import LessonStore
from live_tutor.models.tool_calls import FunctionCall, ToolCall
from live_tutor.transport import TOOLCALL_EVENT


def batch(*calls):
    return ToolCall(function_calls=[FunctionCall(id=i, name=n) for i, n in calls])


@pytest.fixture
def store(session):
    return LessonStore(session)


@pytest.mark.asyncio
async def test_known_and_unknown_tools_in_one_batch(store, transport):
    await transport.connect()
    store.dispatch(LessonAction.START_LESSON)
    dispatcher = ToolCallDispatcher(store, transport)

    await dispatcher.on_tool_call(batch(("a", "go_to_next_step"), ("b", "unknown_tool")))

    assert len(transport.tool_responses) == 1
    responses = transport.tool_responses[0].function_responses
    assert [r.id for r in responses] == ["a", "b"]
    assert [r.name for r in responses] == ["go_to_next_step", "unknown_tool"]
    assert "go_to_next_step" in responses[0].result_text
    assert "unknown_tool" in responses[1].result_text
    # only one MOVE_TO_NEXT applied
    assert store.state.current_index == 1
    assert store.state.instructions[0].status == InstructionStatus.COMPLETED
    assert store.state.instructions[1].status == InstructionStatus.IN_PROGRESS


@pytest.mark.asyncio
async def test_default_result_text(store, transport):
    await transport.connect()
    dispatcher = ToolCallDispatcher(store, transport)
    response = await dispatcher.on_tool_call(batch(("1", "start_lesson")))
    assert response.function_responses[0].result_text == "start_lesson OK."
    assert store.state.status == LessonStatus.IN_PROGRESS


@pytest.mark.asyncio
async def test_lesson_result_override(lesson, store, transport):
    await transport.connect()
    dispatcher = ToolCallDispatcher(
        store, transport, tool_actions=lesson.tool_actions, result_overrides=lesson.result_overrides
    )
    response = await dispatcher.on_tool_call(batch(("1", "start_lesson"), ("2", "verify_step")))
    assert [r.result_text for r in response.function_responses] == ["start_lesson OK.", "Step verified"]
    assert store.state.current_index == 1


@pytest.mark.asyncio
async def test_tool_outside_lesson_table_is_only_acknowledged(lesson, store, transport):
    await transport.connect()
    # the bundled lesson does not declare complete_lesson
    dispatcher = ToolCallDispatcher(store, transport, tool_actions=lesson.tool_actions)
    store.dispatch(LessonAction.START_LESSON)
    before = store.state
    await dispatcher.on_tool_call(batch(("x", "complete_lesson")))
    assert store.state is before


@pytest.mark.asyncio
async def test_informational_tool_does_not_transition(store, transport):
    await transport.connect()
    dispatcher = ToolCallDispatcher(store, transport)
    before = store.state
    response = await dispatcher.on_tool_call(batch(("p", "program_opened")))
    assert store.state is before
    assert response.function_responses[0].result_text == "program_opened OK."


@pytest.mark.asyncio
async def test_full_lesson_via_tool_calls(store, transport):
    await transport.connect()
    dispatcher = ToolCallDispatcher(store, transport)
    await dispatcher.on_tool_call(batch(("0", "start_lesson")))
    for n in range(len(store.state.instructions)):
        await dispatcher.on_tool_call(batch((f"n{n}", "go_to_next_step")))
    assert store.state.status == LessonStatus.COMPLETED
    assert len(transport.tool_responses) == 1 + len(store.state.instructions)


@pytest.mark.asyncio
async def test_empty_batch_sends_nothing(store, transport):
    await transport.connect()
    dispatcher = ToolCallDispatcher(store, transport)
    assert await dispatcher.on_tool_call(ToolCall()) is None
    assert transport.tool_responses == []


@pytest.mark.asyncio
async def test_accepts_raw_camel_case_payload(store, transport):
    await transport.connect()
    dispatcher = ToolCallDispatcher(store, transport)
    await dispatcher.on_tool_call({"functionCalls": [{"id": "c1", "name": "start_lesson", "args": {}}]})
    wire = transport.tool_responses[0].to_wire()
    assert wire == {
        "functionResponses": [
            {"id": "c1", "name": "start_lesson", "response": {"result": {"string_value": "start_lesson OK."}}}
        ]
    }


@pytest.mark.asyncio
async def test_transport_failure_is_surfaced(store, transport):
    transport.send_tool_response = AsyncMock(side_effect=RuntimeError("socket closed"))
    dispatcher = ToolCallDispatcher(store, transport)
    with pytest.raises(TransportError):
        await dispatcher.on_tool_call(batch(("1", "start_lesson")))
    transport.send_tool_response.assert_awaited_once()
    # transitions are not rolled back
    assert store.state.status == LessonStatus.IN_PROGRESS


@pytest.mark.asyncio
async def test_send_before_connect_raises(store, transport):
    dispatcher = ToolCallDispatcher(store, transport)
    with pytest.raises(TransportError):
        await dispatcher.on_tool_call(batch(("1", "start_lesson")))


@pytest.mark.asyncio
async def test_attach_and_detach_listener(store, transport):
    await transport.connect()
    dispatcher = ToolCallDispatcher(store, transport)
    async with dispatcher:
        assert transport.listener_count(TOOLCALL_EVENT) == 1
        await transport.deliver(batch(("1", "start_lesson")))
    assert transport.listener_count(TOOLCALL_EVENT) == 0
    dispatcher.detach()  # idempotent

    await transport.deliver(batch(("2", "go_to_next_step")))
    assert len(transport.tool_responses) == 1
    assert store.state.current_index == 0


def test_parse_tool_call_rejects_garbage():
    with pytest.raises(ValueError):
        parse_tool_call({"functionCalls": [{"name": "missing_id"}]})
    assert parse_tool_call({"functionCalls": []}).function_calls == []


@pytest.mark.asyncio
async def test_empty_result_override_is_sent_as_is(store, transport):
    await transport.connect()
    dispatcher = ToolCallDispatcher(store, transport, result_overrides={"start_lesson": ""})
    response = await dispatcher.on_tool_call(batch(("1", "start_lesson")))
    assert response.function_responses[0].result_text == ""
    assert store.state.status == LessonStatus.IN_PROGRESS


@pytest.mark.asyncio
async def test_malformed_raw_payload_raises_value_error(store, transport):
    await transport.connect()
    dispatcher = ToolCallDispatcher(store, transport)
    with pytest.raises(ValueError):
        await dispatcher.on_tool_call({"functionCalls": [{"name": "start_lesson"}]})
    assert transport.tool_responses == []
    assert store.state.status == LessonStatus.IDLE
