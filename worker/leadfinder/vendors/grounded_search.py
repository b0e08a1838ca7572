"""Client for Gemini generate-content calls grounded with Google Search."""

import logging
from typing import Optional

from google import genai
from google.genai import types

logger = logging.getLogger(__name__)


class GroundedSearchClient:
    """Thin async adapter: prompt in, free text out.

    Upstream SDK errors propagate untouched; the pipeline classifies them.
    """

    def __init__(self, api_key: str, model: str, client: Optional[genai.Client] = None) -> None:
        self.model = model
        self._client = client or genai.Client(api_key=api_key)

    async def generate(self, prompt: str, system_instruction: str) -> str:
        # response_mime_type="application/json" is rejected when tools are enabled,
        # so JSON is requested in the prompt instead.
        config = types.GenerateContentConfig(
            system_instruction=system_instruction,
            tools=[types.Tool(google_search=types.GoogleSearch())],
        )
        logger.debug("generate_content model=%s prompt_chars=%d", self.model, len(prompt))
        response = await self._client.aio.models.generate_content(
            model=self.model,
            contents=prompt,
            config=config,
        )
        return response.text or ""
