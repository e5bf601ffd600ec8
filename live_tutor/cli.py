#!/usr/bin/env python
"""
Command line entrypoints.

`serve` runs the API with uvicorn. `simulate` runs a lesson in-process: you
play the agent by typing tool names (several on one line form one batch) and
see the acknowledgements and lesson state. Enter 'exit' to quit.
"""
import argparse
import asyncio
import logging
from typing import Callable, List, Optional

from live_tutor.config import configure_logging, get_settings
from live_tutor.lessons import LessonDefinition, get_lesson
from live_tutor.models.lesson import LessonSession
from live_tutor.models.tool_calls import FunctionCall, ToolCall
from live_tutor.output_logger import LessonOutputLogger
from live_tutor.session import LessonRunner
from live_tutor.transport import LoopbackTransport

log = logging.getLogger(__name__)

InputFn = Callable[[str], str]
PrintFn = Callable[[str], None]

EXIT_COMMANDS = {"exit", "quit"}


def build_parser() -> argparse.ArgumentParser:
    settings = get_settings()
    parser = argparse.ArgumentParser(prog="live-tutor", description="Agent-guided lesson runner")
    parser.add_argument("--log-level", default=settings.log_level, help="Logging level (default: %(default)s)")
    sub = parser.add_subparsers(dest="command", required=True)

    serve = sub.add_parser("serve", help="Run the HTTP/WebSocket API")
    serve.add_argument("--host", default="127.0.0.1")
    serve.add_argument("--port", type=int, default=8000)
    serve.add_argument("--reload", action="store_true")

    simulate = sub.add_parser("simulate", help="Play the agent against a lesson in the terminal")
    simulate.add_argument("--lesson", default=settings.default_lesson, help="Lesson id (default: %(default)s)")
    simulate.add_argument("--output", default=None, help="Write a session transcript to this file")
    return parser


def render_state(session: LessonSession) -> List[str]:
    lines = [f"Lesson: {session.status.value}"]
    for index, instruction in enumerate(session.instructions):
        marker = ">" if instruction.is_active else " "
        lines.append(f"{marker} {index + 1}: [{instruction.status.value}] {instruction.task}")
    return lines


def parse_batch(text: str, first_id: int) -> ToolCall:
    calls = [FunctionCall(id=f"call-{first_id + n}", name=name) for n, name in enumerate(text.split())]
    return ToolCall(function_calls=calls)


async def simulate(
    lesson: LessonDefinition,
    input_fn: InputFn = input,
    print_fn: PrintFn = print,
    output: Optional[str] = None,
) -> LessonRunner:
    transport = LoopbackTransport()
    runner = LessonRunner(lesson, transport)
    transcript = LessonOutputLogger(output) if output else None
    if transcript:
        runner.store.subscribe(transcript.log_state_change)

    print_fn(f"=== {lesson.title} ===")
    print_fn("Tools: " + ", ".join(d.name for d in lesson.function_declarations))
    print_fn("Type tool names to call them, 'start' to press Start, 'exit' to quit.")

    next_id = 1
    async with runner:
        while True:
            text = input_fn("agent> ").strip()
            if not text:
                continue
            if text.lower() in EXIT_COMMANDS:
                print_fn("Session ended.")
                break
            if text.lower() == "start":
                if await runner.start():
                    print_fn(f"Sent to agent: {transport.sent[-1]}")
                else:
                    print_fn("Lesson already in progress.")
            else:
                tool_call = parse_batch(text, next_id)
                next_id += len(tool_call.function_calls)
                if transcript:
                    transcript.log_tool_call(tool_call)
                if not transport.connected:
                    await transport.connect()
                await transport.deliver(tool_call)
                response = transport.tool_responses[-1]
                if transcript:
                    transcript.log_tool_response(response)
                for item in response.function_responses:
                    print_fn(f"  {item.id} {item.name}: {item.result_text}")
            for line in render_state(runner.state):
                print_fn(line)

    if transcript:
        path = transcript.save()
        print_fn(f"Session log saved to: {path}")
    return runner


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    configure_logging(args.log_level)

    if args.command == "serve":
        import uvicorn
        uvicorn.run("live_tutor.api:app", host=args.host, port=args.port, reload=args.reload)
        return 0

    if args.command == "simulate":
        asyncio.run(simulate(get_lesson(args.lesson), output=args.output))
        return 0

    return 1


if __name__ == "__main__":
    raise SystemExit(main())
