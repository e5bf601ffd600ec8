import functools
import logging
import time

log = logging.getLogger(__name__)


def log_dispatch(handler_fn):
    """Log latency and batch size of an async tool-call handler."""
    @functools.wraps(handler_fn)
    async def wrapper(self, tool_call, *a, **kw):
        start = time.perf_counter()
        try:
            return await handler_fn(self, tool_call, *a, **kw)
        finally:
            elapsed = int((time.perf_counter() - start) * 1000)
            names = [c.name for c in getattr(tool_call, "function_calls", [])]
            log.info(f"[Telemetry] {handler_fn.__name__} handled {len(names)} call(s) {names} in {elapsed} ms")
    return wrapper
