from __future__ import annotations

from typing import Optional

from pydantic_ai import Agent
from pydantic_ai.models import Model
from pydantic_ai.models.openai import OpenAIChatModel
from pydantic_ai.providers.openai import OpenAIProvider
from pydantic_ai.settings import ModelSettings

from app.config import Settings, get_settings

TITLE_INSTRUCTIONS = (
    "Generate a short, descriptive title (max 6 words) for this conversation. "
    "Return only the title, no quotes or extra text."
)


class TitleWriter:
    def __init__(self, model: Model | str, timeout: float = 10.0):
        self.agent = Agent(
            model,
            instructions=TITLE_INSTRUCTIONS,
            model_settings=ModelSettings(
                max_tokens=20, temperature=0.7, timeout=timeout
            ),
        )

    @classmethod
    def from_settings(cls, settings: Optional[Settings] = None) -> "TitleWriter":
        settings = settings or get_settings()
        model = OpenAIChatModel(
            settings.title_model,
            provider=OpenAIProvider(
                base_url=settings.openai_api_base,
                api_key=settings.openai_api_key,
            ),
        )
        return cls(model, timeout=settings.title_timeout_seconds)

    async def summarize(self, transcript: str) -> str:
        """
        Ask the model for a short title describing the given transcript.
        Use this from async code (e.g. FastAPI); do not use run_sync when the event loop is already running.

        Args:
            transcript (str): "role: content" lines of the first turns of a session.

        Returns:
            str: The raw title text as returned by the model.
        """
        result = await self.agent.run(f"Conversation:\n{transcript}")
        return result.output
