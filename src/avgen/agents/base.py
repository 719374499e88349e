"""Shared plumbing for the Claude-backed scene and narration agents."""

import logging
from abc import ABC, abstractmethod
from typing import Generic, TypeVar, Optional

from ..services.anthropic import AnthropicClient
from ..config import config

InputT = TypeVar("InputT")
OutputT = TypeVar("OutputT")


class BaseAgent(ABC, Generic[InputT, OutputT]):
    """One Claude call per request, framed by a fixed system prompt.

    The scene writer and the narrator differ only in their prompts and in
    the sampling settings below. ``client`` is anything exposing
    AnthropicClient's ``create_message``, so tests pass a fake.
    """

    max_tokens: int = 4096
    temperature: float = 0.7

    def __init__(
        self,
        client: Optional[AnthropicClient] = None,
        model: Optional[str] = None,
    ) -> None:
        """Initialize the agent.

        Args:
            client: Claude client. One is built from config if omitted.
            model: Claude model. Defaults to config.default_model.
        """
        self._model = model or config.default_model
        self._client = client or AnthropicClient(model=self._model)
        self._logger = logging.getLogger(f"{__name__}.{self.name}")

    @property
    @abstractmethod
    def name(self) -> str:
        """Short name used in log records."""
        ...

    @property
    @abstractmethod
    def system_prompt(self) -> str:
        ...

    @property
    def model(self) -> str:
        return self._model

    @abstractmethod
    def run(self, input_data: InputT) -> OutputT:
        ...

    def _complete(self, prompt: str) -> str:
        """Ask Claude for a completion of ``prompt`` and return its text.

        Client errors are logged against this agent and re-raised; callers
        decide whether a failed call ends the session or only its narration.
        """
        self._logger.debug(f"{self.name} prompt: {len(prompt)} chars, model {self._model}")

        try:
            reply = self._client.create_message(
                prompt=prompt,
                max_tokens=self.max_tokens,
                system=self.system_prompt,
                temperature=self.temperature,
            )
        except Exception as e:
            self._logger.error(f"{self.name}: Claude request failed: {e}")
            raise

        self._logger.debug(f"{self.name} reply: {len(reply)} chars")
        return reply
