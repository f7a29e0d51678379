"""OpenAI Responses API client for coach suggestions and log analysis."""

import logging
from dataclasses import dataclass

from openai import AsyncOpenAI

from nutrimind.services.suggestions import ResponseT, SuggestionClient

_logger = logging.getLogger(__name__)

COACH_INSTRUCTIONS = (
    "You are the NutriMind coach. Reply only with JSON that matches the given "
    "schema. Use kilograms, grams, millilitres and kcal. Estimates must be "
    "non-negative whole numbers unless the schema allows decimals."
)


@dataclass
class OpenAISuggestionClient(SuggestionClient):
    """Coach and analysis completions through the OpenAI Responses API."""

    client: AsyncOpenAI
    instructions: str = COACH_INSTRUCTIONS

    @classmethod
    def create(cls, api_key: str) -> "OpenAISuggestionClient":
        return cls(client=AsyncOpenAI(api_key=api_key))

    async def complete(  # noqa: PLR0913
        self,
        *,
        model: str,
        reasoning_effort: str | None,
        store: bool,
        prompt: str,
        schema_name: str,
        schema: dict[str, object],
        response_model: type[ResponseT],
    ) -> ResponseT:
        """Ask for a structured reply and validate it as ``response_model``."""
        request: dict[str, object] = {
            "model": model,
            "instructions": self.instructions,
            "input": prompt,
            "text": {
                "format": {
                    "type": "json_schema",
                    "name": schema_name,
                    "strict": True,
                    "schema": schema,
                }
            },
            "store": store,
        }
        if reasoning_effort:
            request["reasoning"] = {"effort": reasoning_effort}

        response = await self.client.responses.create(**request)
        if not response.output_text:
            raise RuntimeError(f"OpenAI returned no {schema_name} output")
        _logger.debug("Received %s from %s", schema_name, model)
        return response_model.model_validate_json(response.output_text)

    async def close(self) -> None:
        await self.client.close()
