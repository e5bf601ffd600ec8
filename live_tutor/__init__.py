"""Lesson progression state machine and tool-call dispatch for agent-guided tutorials."""

__version__ = "0.1.0"
