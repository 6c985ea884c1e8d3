"""Chat-completion client behind the `/api/copilot/ask` proxy.

The credential stays on the server; the browser only ever sends the question.

Wire format (OpenAI-style chat completions):

    POST {url}
    {"model": ..., "messages": [{"role": "system", ...}, {"role": "user", ...}],
     "temperature": 0.7, "max_tokens": 1000}

    Response: {"choices": [{"message": {"content": "..."}}]}
"""

from __future__ import annotations

import logging

import httpx

logger = logging.getLogger(__name__)

MAX_QUESTION_LENGTH = 2000
ALLOWED_AGENTS = frozenset({"dolmenwood"})
NO_ANSWER = "No response received"


class ChatError(RuntimeError):
    """Raised when the chat backend cannot be reached or returns an error."""

    def __init__(self, message: str, status_code: int = 502) -> None:
        super().__init__(message)
        self.status_code = status_code


def system_prompt(agent_name: str) -> str:
    return (
        f"You are the {agent_name} agent, an expert on the Dolmenwood tabletop RPG. "
        "Provide helpful, accurate answers about the game's rules, lore, character "
        "creation, and gameplay."
    )


class ChatClient:
    """Async HTTP client for a chat-completions endpoint.

    Args:
        url:        Full endpoint URL.
        token:      Bearer token sent upstream.
        agent_name: Persona named in the system prompt; must be allow-listed.
        model:      Model identifier forwarded as-is.
        timeout:    HTTP timeout in seconds.
    """

    def __init__(
        self,
        url: str,
        token: str,
        agent_name: str = "dolmenwood",
        model: str = "gpt-4",
        timeout: float = 60.0,
    ) -> None:
        self._url = url
        self._token = token
        self._agent_name = agent_name
        self._model = model
        self._timeout = timeout

    def _headers(self) -> dict[str, str]:
        return {
            "Authorization": f"Bearer {self._token}",
            "Content-Type": "application/json",
            "Accept": "application/json",
            "User-Agent": "Dolmenwood-Dashboard",
        }

    def _body(self, question: str) -> dict:
        return {
            "messages": [
                {"role": "system", "content": system_prompt(self._agent_name)},
                {"role": "user", "content": question},
            ],
            "model": self._model,
            "temperature": 0.7,
            "max_tokens": 1000,
        }

    async def ask(self, question: str) -> str:
        if self._agent_name not in ALLOWED_AGENTS:
            logger.error("Invalid agent name: %s", self._agent_name)
            raise ChatError("Invalid agent configuration", status_code=500)

        logger.debug("chat ask url=%s question_len=%d", self._url, len(question))
        try:
            async with httpx.AsyncClient(timeout=self._timeout) as client:
                resp = await client.post(self._url, json=self._body(question), headers=self._headers())
                resp.raise_for_status()
        except httpx.ConnectError as e:
            raise ChatError("Cannot connect to chat backend") from e
        except httpx.HTTPStatusError as e:
            logger.error("Chat API error: %s", e.response.status_code)
            raise ChatError(
                "Failed to get response from chat backend",
                status_code=e.response.status_code,
            ) from e
        except httpx.TimeoutException as e:
            raise ChatError(f"Chat backend timed out after {self._timeout}s") from e

        try:
            data = resp.json()
        except ValueError as e:
            raise ChatError("Unexpected response format from chat backend") from e
        choices = data.get("choices") or []
        if not choices:
            return NO_ANSWER
        return (choices[0].get("message") or {}).get("content") or NO_ANSWER
