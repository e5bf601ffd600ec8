"""Custom exceptions for the live tutor application."""

class LessonConfigError(ValueError):
    """Raised when a lesson definition is invalid."""
    pass

class UnknownLessonError(LessonConfigError):
    """Raised when a lesson id is not registered."""
    def __init__(self, lesson_id: str):
        super().__init__(f"Unknown lesson '{lesson_id}'")
        self.lesson_id = lesson_id

class TransportError(RuntimeError):
    """Raised when the agent transport fails to connect, send, or deliver tool responses."""
    pass
