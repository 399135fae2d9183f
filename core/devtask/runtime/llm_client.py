"""
Chat-completion client over the OpenAI API.
The underlying AsyncOpenAI client is created on first use so the package
imports without credentials.
"""

import json
from typing import Any, Optional

from openai import AsyncOpenAI, OpenAIError

from devtask.config import openai_api_key, openai_base_url, openai_model
from devtask.utils.errors import LLMError
from devtask.utils.logging import logger


class LLMClient:
    """
    Minimal async wrapper used by the classifier and the chat/code handlers.

    Two entry points:
    - chat(): plain completion, returns the assistant text
    - call_function(): forces a single function call and returns its parsed arguments
    """

    def __init__(
        self,
        api_key: Optional[str] = None,
        model: Optional[str] = None,
        base_url: Optional[str] = None,
    ):
        self.api_key = api_key or openai_api_key()
        self.model = model or openai_model()
        self.base_url = base_url or openai_base_url()
        self._client: Optional[AsyncOpenAI] = None

    @property
    def client(self) -> AsyncOpenAI:
        if self._client is None:
            if not self.api_key:
                raise LLMError("OPENAI_API_KEY não configurada. Defina-a no arquivo .env.")
            self._client = AsyncOpenAI(api_key=self.api_key, base_url=self.base_url)
            logger.info(f"OpenAI client ready (model={self.model})")
        return self._client

    async def chat(
        self,
        messages: list[dict],
        max_tokens: int = 1000,
        temperature: float = 0.7,
    ) -> str:
        try:
            response = await self.client.chat.completions.create(
                model=self.model,
                messages=messages,
                max_tokens=max_tokens,
                temperature=temperature,
            )
        except OpenAIError as exc:
            logger.error(f"Chat completion failed: {exc}")
            raise LLMError(str(exc)) from exc

        content = response.choices[0].message.content if response.choices else None
        return content or ""

    async def call_function(
        self,
        messages: list[dict],
        function: dict,
        temperature: float = 0.1,
    ) -> dict[str, Any]:
        """
        Ask the model to call `function` (an OpenAI function schema with
        name/description/parameters) and return the decoded arguments.
        """
        try:
            response = await self.client.chat.completions.create(
                model=self.model,
                messages=messages,
                tools=[{"type": "function", "function": function}],
                tool_choice={"type": "function", "function": {"name": function["name"]}},
                temperature=temperature,
            )
        except OpenAIError as exc:
            logger.error(f"Function call failed: {exc}")
            raise LLMError(str(exc)) from exc

        if not response.choices:
            raise LLMError("Resposta vazia do modelo")
        tool_calls = response.choices[0].message.tool_calls or []
        if not tool_calls:
            raise LLMError("O modelo não chamou a função solicitada")

        try:
            arguments = json.loads(tool_calls[0].function.arguments or "{}")
        except json.JSONDecodeError as exc:
            raise LLMError(f"Argumentos inválidos na chamada de função: {exc}") from exc
        if not isinstance(arguments, dict):
            raise LLMError("Argumentos da chamada de função não são um objeto")
        return arguments
