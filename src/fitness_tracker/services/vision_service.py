"""
Service for OpenAI vision API interactions.
"""

import logging

import httpx

from ..config import SETTINGS

MEAL_CONTEXT = (
    "Analyse this photo of a meal to estimate calories and protein. "
    "List the foods you can identify, in plain English, one per line."
)

FALLBACK_DESCRIPTION = "simulated analysis - assorted foods on a plate"


class VisionService:
    """Service for describing images with the OpenAI chat completions API."""

    def __init__(self, api_key: str | None = None, model: str | None = None):
        self.api_key = api_key if api_key is not None else SETTINGS.OPENAI_API_KEY
        self.base_url = "https://api.openai.com/v1"
        self.model = model or SETTINGS.OPENAI_MODEL
        self.default_timeout = 20.0

    async def describe_image(
        self, image_url: str, context: str = MEAL_CONTEXT, max_tokens: int = 300
    ) -> str | None:
        """
        Ask the model to describe an image.

        Args:
            image_url: Public URL of the image
            context: Instructions sent with the image
            max_tokens: Maximum tokens for response

        Returns:
            The model's description or None if the call failed
        """
        if not self.api_key:
            logging.info("OpenAI API key not configured")
            return None

        if not image_url.strip():
            logging.warning("Empty image URL provided to vision service")
            return None

        try:
            async with httpx.AsyncClient(timeout=self.default_timeout) as client:
                response = await client.post(
                    f"{self.base_url}/chat/completions",
                    headers={"Authorization": f"Bearer {self.api_key}"},
                    json={
                        "model": self.model,
                        "messages": [
                            {
                                "role": "user",
                                "content": [
                                    {"type": "text", "text": context},
                                    {"type": "image_url", "image_url": {"url": image_url}},
                                ],
                            }
                        ],
                        "max_tokens": max_tokens,
                    },
                )
                response.raise_for_status()

                result = response.json()
                if "choices" in result and len(result["choices"]) > 0:
                    content = (result["choices"][0]["message"].get("content") or "").strip()
                    logging.info("Vision response received: %d characters", len(content))
                    return content or None
                else:
                    logging.warning("Unexpected OpenAI response format")
                    return None

        except httpx.HTTPError as e:
            logging.warning("OpenAI HTTP request failed: %s", e)
            return None
        except Exception as e:
            logging.exception("Unexpected error in vision service: %s", e)
            return None

    async def describe_meal(self, image_url: str) -> str:
        """Describe a meal photo, falling back to a generic description."""
        description = await self.describe_image(image_url)
        return description or FALLBACK_DESCRIPTION

    def is_available(self) -> bool:
        """Check if the vision service is configured."""
        return bool(self.api_key)
