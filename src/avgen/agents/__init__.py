"""AI agents for scene code and narration."""

from .base import BaseAgent
from .coder import SceneCodeAgent, CodeRequest, build_scene_prompt, clean_code, validate_code
from .narrator import NarrationAgent, NarrationRequest

__all__ = [
    "BaseAgent",
    "SceneCodeAgent",
    "CodeRequest",
    "build_scene_prompt",
    "clean_code",
    "validate_code",
    "NarrationAgent",
    "NarrationRequest",
]
