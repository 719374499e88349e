"""External service integrations."""

from .anthropic import AnthropicClient
from .manim import RenderExecutor, find_rendered_videos
from .process import ProcessError, ProcessResult, run_process

__all__ = [
    "AnthropicClient",
    "RenderExecutor",
    "find_rendered_videos",
    "ProcessError",
    "ProcessResult",
    "run_process",
]
