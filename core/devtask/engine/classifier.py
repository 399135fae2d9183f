"""
The classifier asks the language model to extract a structured intent from
the user's message. Any failure falls back to a plain chat intent.
"""

from typing import Optional

from pydantic import ValidationError

from devtask.config import CLASSIFIER_TEMPERATURE
from devtask.intents import ClassifierOutput, Intent, IntentType, Message
from devtask.runtime.llm_client import LLMClient
from devtask.utils.logging import logger


class IntentClassifier:
    """
    Wraps a single forced function call (`extract_intent`) to the model.
    The classifier never raises: errors become `Intent.chat_fallback`.
    """

    SYSTEM_PROMPT = (
        "Você é um assistente que analisa mensagens do usuário e identifica suas intenções. "
        "Você deve extrair a intenção principal, a ação desejada e quaisquer parâmetros relevantes. "
        "Considere o contexto da conversa ao interpretar mensagens ambíguas ou curtas.\n\n"
        "Ações por tipo:\n"
        "- file: list, read, structure, create, modify, delete, apply, cancel, changes\n"
        "- task: create, list, update, select, delete, sync\n"
        "- github: list_issues, list_milestones, list_projects, info\n"
        "- code: generate, execute, analyze, explain, optimize, debug\n"
        "- chat: respond, explain, help\n\n"
        "Use o parâmetro 'path' para caminhos de arquivos e diretórios, "
        "'content' para o conteúdo de arquivos e 'code' para trechos de código."
    )

    EXTRACT_INTENT_FUNCTION = {
        "name": "extract_intent",
        "description": "Extrai a intenção do usuário a partir da mensagem",
        "parameters": {
            "type": "object",
            "properties": {
                "intent_type": {
                    "type": "string",
                    "enum": [t.value for t in IntentType],
                    "description": "O tipo de intenção identificada na mensagem do usuário",
                },
                "action": {
                    "type": "string",
                    "description": "A ação específica que o usuário deseja realizar",
                },
                "parameters": {
                    "type": "object",
                    "description": "Parâmetros extraídos da mensagem que são relevantes para a ação",
                    "additionalProperties": True,
                },
            },
            "required": ["intent_type", "action"],
        },
    }

    def __init__(self, llm: Optional[LLMClient] = None):
        self.llm = llm or LLMClient()

    def _build_messages(self, message: str, history: list[Message]) -> list[dict]:
        messages = [{"role": "system", "content": self.SYSTEM_PROMPT}]
        messages += [m.to_dict() for m in history if m.role.value != "system"]
        messages.append({"role": "user", "content": message})
        return messages

    async def classify(self, message: str, history: Optional[list[Message]] = None) -> Intent:
        """
        Classify a user message.

        Args:
            message: The literal user message
            history: Recent conversation messages, oldest first

        Returns:
            The raw intent, or the chat fallback if anything goes wrong
        """
        try:
            arguments = await self.llm.call_function(
                self._build_messages(message, history or []),
                self.EXTRACT_INTENT_FUNCTION,
                temperature=CLASSIFIER_TEMPERATURE,
            )
            intent = ClassifierOutput.model_validate(arguments).to_intent(message)
        except ValidationError as e:
            logger.warning(f"Classifier returned invalid arguments: {e}")
            return Intent.chat_fallback(message)
        except Exception as e:
            logger.warning(f"Classification failed: {e}, falling back to chat")
            return Intent.chat_fallback(message)

        logger.info(f"Classified intent: {intent.type.value}.{intent.action}")
        return intent
