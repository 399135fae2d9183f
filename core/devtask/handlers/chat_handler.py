"""
Chat handler: general conversation, the fallback for everything else.
"""

from typing import Optional

from devtask.config import CHAT_TEMPERATURE
from devtask.context.session import SessionContext
from devtask.handlers.base import BaseHandler
from devtask.intents import Intent, IntentType
from devtask.runtime.llm_client import LLMClient
from devtask.utils.errors import LLMError
from devtask.utils.logging import logger

HELP_TEXT = """# Ajuda do DevTask

O DevTask é um assistente em linguagem natural para o seu projeto. Você pode pedir as coisas do jeito que falaria com um colega.

## Tarefas
- Criar: "Crie uma nova tarefa para implementar login de usuários"
- Listar: "Mostre minhas tarefas"
- Atualizar: "Atualize a tarefa 123 para status 'em andamento'"
- Selecionar: "Selecione a tarefa 123"

## Arquivos
- Listar: "Mostre os arquivos na pasta src"
- Ler: "Mostre o conteúdo do arquivo package.json"
- Estrutura: "Mostre a estrutura do projeto"

## Alterações em arquivos
- Criar, modificar ou excluir arquivos: as alterações ficam pendentes até você confirmar
- "mostrar alterações" (ou !changes) para revisar o diff
- "aplicar alterações" (ou !apply) para gravar
- "cancelar alterações" (ou !cancel) para descartar

## Código
- Gerar: "Crie uma função para validar e-mails"
- Explicar: "Explique esse código"
- Executar: "Execute este código"

## GitHub
- "Liste as issues do GitHub"
- "Quais milestones existem?"

Digite "sair" para encerrar."""

APOLOGY = (
    "Desculpe, estou tendo dificuldades para processar essa solicitação no momento. "
    "Você pode tentar novamente ou reformular sua pergunta?"
)


class ChatHandler(BaseHandler):
    """Handles `chat.*` intents and any intent type nobody else claims."""

    intent_type = IntentType.CHAT

    def __init__(self, session: SessionContext, llm: Optional[LLMClient] = None):
        super().__init__(session)
        self.llm = llm or LLMClient()
        self.actions = {
            "respond": self.handle_respond,
            "explain": self.handle_respond,
            "help": self.handle_help,
        }

    async def handle(self, intent: Intent) -> str:
        # Chat answers everything, known action or not
        if intent.action == "help":
            return await self.handle_help(intent)
        return await self.handle_respond(intent)

    async def handle_help(self, intent: Intent) -> str:
        return HELP_TEXT

    def _system_prompt(self) -> str:
        state = self.context.state
        lines = [
            "Você é um assistente de desenvolvimento que faz parte do DevTask.",
            "Você pode ajudar com gerenciamento de tarefas, integração com GitHub, "
            "exploração e modificação de arquivos, e geração de código.",
            "",
            "Informações contextuais atuais:",
            f"- Diretório atual: {state.current_directory or '.'}",
        ]
        if state.current_file:
            lines.append(f"- Arquivo atual: {state.current_file}")
        if state.current_task:
            lines.append(f"- Tarefa atual selecionada: {state.current_task}")
        if state.pending_changes:
            lines.append("- Há alterações pendentes que precisam ser aplicadas ou canceladas.")
        lines += [
            "",
            "Responda de forma clara, concisa e útil em português brasileiro. "
            "Se você não sabe a resposta para algo específico, sugira alternativas úteis.",
        ]
        return "\n".join(lines)

    async def handle_respond(self, intent: Intent) -> str:
        messages = [{"role": "system", "content": self._system_prompt()}]
        messages += [m for m in self.context.history_dicts() if m["role"] != "system"]
        if intent.original_message and messages[-1]["content"] != intent.original_message:
            messages.append({"role": "user", "content": intent.original_message})

        try:
            reply = await self.llm.chat(messages, max_tokens=1000, temperature=CHAT_TEMPERATURE)
        except LLMError as exc:
            logger.warning(f"Chat response failed: {exc}")
            return APOLOGY
        return reply or "Não foi possível gerar uma resposta."
