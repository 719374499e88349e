"""Narration script agent."""

from dataclasses import dataclass

from ..errors import NarrationError
from .base import BaseAgent

NARRATION_TEMPLATE = """You are writing the voice-over for a mathematical animation video.

The user requested: "{prompt}"

The animation code:
{code}

Write a clear, engaging narration script (2-4 sentences) that explains what viewers will see in this animation.
- Use simple, conversational language
- Describe the visual elements and their purpose
- Keep it concise and educational
- Return ONLY the narration text, no extra formatting"""


@dataclass
class NarrationRequest:
    """Input data for the narration agent."""

    prompt: str
    code: str


class NarrationAgent(BaseAgent[NarrationRequest, str]):
    """Agent that summarizes a rendered scene as a short spoken script."""

    max_tokens = 512

    @property
    def name(self) -> str:
        """Return the agent's name."""
        return "NarrationAgent"

    @property
    def system_prompt(self) -> str:
        return "You write short, friendly narration for educational animations."

    def run(self, input_data: NarrationRequest) -> str:
        """Write narration text.

        Raises:
            NarrationError: If the model returns nothing.
        """
        prompt = NARRATION_TEMPLATE.format(prompt=input_data.prompt, code=input_data.code)
        text = self._complete(prompt).strip()
        if not text:
            raise NarrationError("Model returned empty narration")
        self._logger.info(f"Narration: {len(text.split())} words")
        return text
