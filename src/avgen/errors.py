"""Exception hierarchy for the generation pipeline."""

from typing import Optional


class AvgenError(Exception):
    """Base class for all pipeline errors."""


class RequestValidationError(AvgenError):
    """The request cannot be served (missing prompt or credentials)."""


class GenerationError(AvgenError):
    """The LLM produced code that must not be handed to the renderer.

    Attributes:
        code: The cleaned code that failed validation (may be empty).
    """

    def __init__(self, message: str, code: str = "") -> None:
        super().__init__(message)
        self.code = code


class EmptyGenerationError(GenerationError):
    """The model returned nothing usable."""


class MissingEntryPointError(GenerationError):
    """The code does not declare the fixed scene class."""


class DuplicateEntryPointError(GenerationError):
    """The code declares the fixed scene class more than once."""


class RenderError(AvgenError):
    """A render attempt failed.

    Attributes:
        cmd: The command line that was invoked, if any.
    """

    def __init__(self, message: str, cmd: Optional[str] = None) -> None:
        super().__init__(message)
        self.cmd = cmd


class RenderTimeoutError(RenderError):
    """The renderer exceeded its wall-clock budget."""


class NoOutputProducedError(RenderError):
    """The renderer exited cleanly but no video was found."""


class NarrationError(AvgenError):
    """A narration step (text, speech, probe, extend, merge) failed."""
