"""Chat completions client for OpenAI-compatible endpoints (direct or through a gateway)."""

import httpx
from typing import Any, Dict, List, Optional

from ..config import OPENAI_API_KEY, GATEWAY_BASE_URL, OPENAI_MODEL, LLM_TIMEOUT
from ..logging import get_logger

logger = get_logger(__name__)


class ChatClient:
    """Client for the chat completions API."""

    def __init__(self, api_key: Optional[str] = None, model: Optional[str] = None, base_url: Optional[str] = None):
        self.api_key = api_key or OPENAI_API_KEY
        self.model = model or OPENAI_MODEL
        self.base_url = base_url or GATEWAY_BASE_URL

        # Validate API key
        if not self.api_key or not self.api_key.strip():
            raise ValueError(
                "OPENAI_API_KEY is not set. Please set it in your .env file or environment variables."
            )

        self.client = httpx.Client(
            base_url=self.base_url,
            headers={
                "Authorization": f"Bearer {self.api_key.strip()}",
                "Content-Type": "application/json",
            },
            timeout=LLM_TIMEOUT,
        )

    def chat(
        self,
        messages: List[Dict[str, Any]],
        tools: Optional[List[Dict[str, Any]]] = None,
        temperature: float = 0.7,
    ) -> Dict[str, Any]:
        """
        Send chat completion request.

        Args:
            messages: List of message dicts with 'role' and 'content'
            tools: Optional list of tool definitions
            temperature: Sampling temperature

        Returns:
            Raw assistant message object from API response
        """
        payload: Dict[str, Any] = {
            "model": self.model,
            "messages": messages,
            "temperature": temperature,
        }

        if tools:
            payload["tools"] = tools

        try:
            response = self.client.post("/chat/completions", json=payload)
            response.raise_for_status()
            data = response.json()

            if "choices" in data and len(data["choices"]) > 0:
                message = data["choices"][0].get("message", {})
                logger.debug(f"LLM response: {message.get('role')} message with {len(message.get('tool_calls') or [])} tool calls")
                return message
            else:
                raise ValueError("No choices in chat completions response")

        except httpx.HTTPStatusError as e:
            error_text = e.response.text
            logger.error(f"LLM API error: {e.response.status_code} - {error_text}")
            logger.error(f"Model: {self.model}, tools: {len(tools) if tools else 0}")
            raise ValueError(f"LLM API error ({e.response.status_code}): {error_text}")
        except Exception as e:
            logger.error(f"LLM request failed: {e}")
            raise

    def __del__(self):
        """Close HTTP client on cleanup."""
        if hasattr(self, "client"):
            self.client.close()
