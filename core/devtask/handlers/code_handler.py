"""
Code handler: generation, review and execution of code snippets.
"""

from typing import Optional

from devtask.config import CODE_TEMPERATURE
from devtask.context.session import SessionContext
from devtask.handlers.base import BaseHandler
from devtask.intents import Intent, IntentType
from devtask.runtime.llm_client import LLMClient
from devtask.tools.code_runner import execute_code
from devtask.tools.file_ops import FileOperations, is_path_safe
from devtask.utils.errors import LLMError
from devtask.utils.logging import logger
from devtask.utils.response_formatter import ResponseFormatter

# action -> (system prompt, user prompt template, response title)
REVIEW_PROMPTS = {
    "analyze": (
        "Você é um revisor de código experiente. Analise o código fornecido e identifique problemas, "
        "potenciais bugs, oportunidades de melhoria e boas práticas que podem ser aplicadas.",
        "Analise o seguinte código e identifique possíveis problemas, melhorias e boas práticas:\n\n{code}",
        "Análise do código",
    ),
    "explain": (
        "Você é um professor de programação que explica código de forma clara e acessível. "
        "Explique o código fornecido, destacando conceitos importantes e funcionalidades.",
        "Explique o seguinte código de forma clara e detalhada:\n\n{code}",
        "Explicação do código",
    ),
    "optimize": (
        "Você é um especialista em otimização de código. Refatore o código fornecido para melhorar "
        "a performance, legibilidade e manutenção, explicando as melhorias feitas.",
        "Otimize o seguinte código para melhorar a performance, legibilidade e manutenção:\n\n{code}",
        "Código otimizado",
    ),
    "debug": (
        "Você é um especialista em depuração de código. Identifique e corrija problemas no código "
        "fornecido, explicando o que estava errado e como foi corrigido.",
        "Depure o seguinte código e corrija os problemas encontrados:\n\n{code}",
        "Resultado da depuração",
    ),
}

GENERATE_SYSTEM_PROMPT = (
    "Você é um assistente especializado em gerar código de alta qualidade. "
    "Seu código deve ser limpo, bem documentado e seguir as melhores práticas."
)


class CodeHandler(BaseHandler):
    """Handles `code.*` intents."""

    intent_type = IntentType.CODE

    def __init__(self, session: SessionContext, llm: Optional[LLMClient] = None):
        super().__init__(session)
        self.llm = llm or LLMClient()
        self.actions = {
            "generate": self.handle_generate,
            "execute": self.handle_execute,
            "analyze": self.handle_review,
            "explain": self.handle_review,
            "optimize": self.handle_review,
            "debug": self.handle_review,
        }

    def _load_code(self, intent: Intent) -> tuple[Optional[str], Optional[str]]:
        """
        Code to work on, from the `code` parameter or the file at `path`.
        Returns (code, error message).
        """
        code = intent.get_param("code")
        if code:
            return ResponseFormatter.strip_code_fence(code), None

        path = intent.get_param("path") or self.context.state.current_file
        if not path:
            return None, None
        if not is_path_safe(path, self.session.root):
            intent.parameters.pop("path", None)
            return None, f"⚠️ Acesso negado. O arquivo \"{path}\" é sensível ou está fora do projeto."
        content = FileOperations.read_file(path, self.session.root)
        if content is None:
            intent.parameters.pop("path", None)
            return None, f"Não consegui encontrar ou ler o arquivo \"{path}\"."
        intent.parameters["path"] = path
        return content, None

    async def handle_generate(self, intent: Intent) -> str:
        description = intent.get_param("description", "prompt")
        if not description:
            return "Por favor, descreva o código que deseja gerar."

        language = intent.get_param("language", default="Python")
        prompt = f"Gere código {language} para: {description}"
        requirements = intent.get_param("requirements")
        if requirements:
            prompt += f"\n\nRequisitos adicionais: {requirements}"

        messages = [{"role": "system", "content": GENERATE_SYSTEM_PROMPT}]
        messages += [m for m in self.context.history_dicts() if m["role"] != "system"]
        messages.append({"role": "user", "content": prompt})

        try:
            generated = await self.llm.chat(messages, max_tokens=2000, temperature=CODE_TEMPERATURE)
        except LLMError as exc:
            logger.warning(f"Code generation failed: {exc}")
            return f"Erro ao gerar código: {exc}"
        if not generated:
            return "Não foi possível gerar o código. Resposta inesperada da API."
        return (
            f"Código gerado para: {description}\n\n{generated}\n\n"
            "Você pode modificar este código conforme necessário ou pedir para executá-lo."
        )

    async def handle_execute(self, intent: Intent) -> str:
        code = intent.get_param("code")
        if not code:
            return "Por favor, forneça o código que deseja executar."

        result = await execute_code(ResponseFormatter.strip_code_fence(code))
        if result.timed_out:
            return f"⚠️ {result.stderr}"
        output = result.output or "(sem saída)"
        title = "Resultado da execução" if result.success else f"Erro na execução (código {result.exit_code})"
        return f"{title}:\n\n```\n{output}\n```"

    async def handle_review(self, intent: Intent) -> str:
        system_prompt, template, title = REVIEW_PROMPTS[intent.action]
        code, error = self._load_code(intent)
        if error:
            return error
        if not code:
            return "Por favor, forneça o código ou o arquivo que deseja usar."

        prompt = template.format(code=code)
        reported_error = intent.get_param("error")
        if intent.action == "debug" and reported_error:
            prompt += f"\n\nO erro relatado é: {reported_error}"

        messages = [
            {"role": "system", "content": system_prompt},
            {"role": "user", "content": prompt},
        ]
        try:
            reply = await self.llm.chat(messages, max_tokens=2000, temperature=CODE_TEMPERATURE)
        except LLMError as exc:
            logger.warning(f"Code {intent.action} failed: {exc}")
            return f"Erro ao processar o código: {exc}"
        if not reply:
            return "Não foi possível processar o código. Resposta inesperada da API."
        return f"{title}:\n\n{reply}"
