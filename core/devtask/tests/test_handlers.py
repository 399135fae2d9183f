"""
Tests for the action handlers.
"""

from unittest.mock import AsyncMock, MagicMock

import httpx
import pytest

from devtask.context.session import SessionContext
from devtask.handlers import ChatHandler, CodeHandler, FileHandler, GitHubHandler, TaskHandler
from devtask.handlers.chat_handler import APOLOGY, HELP_TEXT
from devtask.handlers.file_handler import CONFLICT_WARNING
from devtask.handlers.task_handler import SYNC_GUIDANCE
from devtask.intents import Intent, IntentType
from devtask.tools.github import GitHubClient
from devtask.utils.errors import LLMError


@pytest.fixture
def session(tmp_path):
    (tmp_path / "src").mkdir()
    (tmp_path / "src" / "app.py").write_text("def soma(a, b):\n    return a + b\n")
    (tmp_path / "README.md").write_text("# Projeto\n")
    (tmp_path / ".env").write_text("SECRET=1\n")
    return SessionContext(root=tmp_path)


@pytest.fixture
def llm():
    client = MagicMock()
    client.chat = AsyncMock(return_value="resposta do modelo")
    client.call_function = AsyncMock()
    return client


def _intent(type_, action, **params):
    return Intent(type=type_, action=action, parameters=params, original_message="mensagem")


class TestFileHandler:
    """file.* actions."""

    @pytest.fixture
    def handler(self, session):
        return FileHandler(session)

    @pytest.mark.asyncio
    async def test_read_emits_marker(self, handler):
        response = await handler.handle(_intent(IntentType.FILE, "read", path="src/app.py"))
        assert response.startswith('Conteúdo de "src/app.py":')
        assert "return a + b" in response

    @pytest.mark.asyncio
    async def test_read_falls_back_to_current_file(self, handler, session):
        session.conversation.state.current_file = "README.md"
        intent = _intent(IntentType.FILE, "read", path=".")
        response = await handler.handle(intent)
        assert response.startswith('Conteúdo de "README.md":')
        assert intent.parameters["path"] == "README.md"

    @pytest.mark.asyncio
    async def test_read_sensitive_file_is_denied(self, handler):
        response = await handler.handle(_intent(IntentType.FILE, "read", path=".env"))
        assert response.startswith("⚠️ Acesso negado")
        assert "SECRET" not in response

    @pytest.mark.asyncio
    async def test_read_missing_file(self, handler):
        response = await handler.handle(_intent(IntentType.FILE, "read", path="nope.py"))
        assert "Não consegui encontrar" in response

    @pytest.mark.asyncio
    async def test_list_hides_sensitive_entries(self, handler):
        response = await handler.handle(_intent(IntentType.FILE, "list", path="."))
        assert response.startswith('Arquivos em ".":')
        assert "📁 src" in response
        assert "📄 README.md" in response
        assert ".env" not in response

    @pytest.mark.asyncio
    async def test_list_outside_root_is_denied(self, handler):
        response = await handler.handle(_intent(IntentType.FILE, "list", path="../"))
        assert response.startswith("⚠️ Acesso negado")

    @pytest.mark.asyncio
    async def test_structure(self, handler):
        response = await handler.handle(_intent(IntentType.FILE, "structure", path="."))
        assert response.startswith('Estrutura de diretórios para ".":')
        assert "└── app.py" in response

    @pytest.mark.asyncio
    async def test_modify_then_conflict_then_apply(self, handler, session):
        response = await handler.handle(
            _intent(IntentType.FILE, "modify", path="README.md", content="```md\n# Novo\n```")
        )
        assert response.startswith("✅ Propus a modificação")

        conflict = await handler.handle(_intent(IntentType.FILE, "create", path="x.txt", content="x"))
        assert conflict == CONFLICT_WARNING

        preview = await handler.handle(_intent(IntentType.FILE, "changes"))
        assert "✏️ MODIFICAR: README.md" in preview

        applied = await handler.handle(_intent(IntentType.FILE, "apply"))
        assert applied.startswith("✅ Alterações aplicadas com sucesso")
        assert (session.root / "README.md").read_text() == "# Novo\n"

    @pytest.mark.asyncio
    async def test_modify_without_content_asks_for_it(self, handler):
        response = await handler.handle(_intent(IntentType.FILE, "modify", path="README.md"))
        assert "preciso que você forneça o novo conteúdo" in response

    @pytest.mark.asyncio
    async def test_modify_identical_content(self, handler, session):
        response = await handler.handle(
            _intent(IntentType.FILE, "modify", path="README.md", content="# Projeto\n")
        )
        assert "idêntico" in response
        assert not session.changes.has_pending_changes()

    @pytest.mark.asyncio
    async def test_create_existing_file(self, handler):
        response = await handler.handle(_intent(IntentType.FILE, "create", path="README.md", content="x"))
        assert response.startswith("❌")

    @pytest.mark.asyncio
    async def test_delete_and_cancel(self, handler, session):
        response = await handler.handle(_intent(IntentType.FILE, "delete", path="README.md"))
        assert response.startswith("✅ Exclusão")

        cancelled = await handler.handle(_intent(IntentType.FILE, "cancel"))
        assert cancelled == "✅ Todas as alterações pendentes foram canceladas."
        assert (session.root / "README.md").exists()

        again = await handler.handle(_intent(IntentType.FILE, "cancel"))
        assert again == "Não há alterações pendentes para cancelar."

    @pytest.mark.asyncio
    async def test_create_unsafe_path(self, handler):
        response = await handler.handle(_intent(IntentType.FILE, "create", path="../fora.txt", content="x"))
        assert response.startswith("⚠️ Acesso negado")

    @pytest.mark.asyncio
    async def test_unsupported_action(self, handler):
        response = await handler.handle(_intent(IntentType.FILE, "rename"))
        assert response == (
            "Ainda não sei como rename arquivos. Posso te ajudar com outras ações como: "
            "listar arquivos, ler um arquivo, visualizar a estrutura do projeto."
        )


class TestChatHandler:
    """chat.* actions and the chat fallback."""

    @pytest.mark.asyncio
    async def test_help_is_static(self, session, llm):
        handler = ChatHandler(session, llm)
        assert await handler.handle(_intent(IntentType.CHAT, "help")) == HELP_TEXT
        llm.chat.assert_not_called()

    @pytest.mark.asyncio
    async def test_respond_uses_state_and_history(self, session, llm):
        session.conversation.state.current_file = "src/app.py"
        session.conversation.add_user_message("mensagem")
        handler = ChatHandler(session, llm)

        response = await handler.handle(_intent(IntentType.CHAT, "respond"))

        assert response == "resposta do modelo"
        messages = llm.chat.call_args.args[0]
        assert messages[0]["role"] == "system"
        assert "Arquivo atual: src/app.py" in messages[0]["content"]
        assert messages[-1] == {"role": "user", "content": "mensagem"}
        assert sum(1 for m in messages if m["content"] == "mensagem") == 1

    @pytest.mark.asyncio
    async def test_unknown_action_is_answered(self, session, llm):
        handler = ChatHandler(session, llm)
        assert await handler.handle(_intent(IntentType.CHAT, "joke")) == "resposta do modelo"

    @pytest.mark.asyncio
    async def test_llm_failure_apologises(self, session, llm):
        llm.chat.side_effect = LLMError("offline")
        handler = ChatHandler(session, llm)
        assert await handler.handle(_intent(IntentType.CHAT, "respond")) == APOLOGY


class TestCodeHandler:
    """code.* actions."""

    @pytest.mark.asyncio
    async def test_explain_reads_file(self, session, llm):
        handler = CodeHandler(session, llm)
        response = await handler.handle(_intent(IntentType.CODE, "explain", path="src/app.py"))

        assert response == "Explicação do código:\n\nresposta do modelo"
        prompt = llm.chat.call_args.args[0][-1]["content"]
        assert "def soma(a, b):" in prompt

    @pytest.mark.asyncio
    async def test_explain_strips_code_fence(self, session, llm):
        handler = CodeHandler(session, llm)
        await handler.handle(_intent(IntentType.CODE, "analyze", code="```python\nx = 1\n```"))
        prompt = llm.chat.call_args.args[0][-1]["content"]
        assert "x = 1" in prompt
        assert "```" not in prompt

    @pytest.mark.asyncio
    async def test_explain_sensitive_file_is_denied(self, session, llm):
        handler = CodeHandler(session, llm)
        response = await handler.handle(_intent(IntentType.CODE, "explain", path=".env"))
        assert response.startswith("⚠️ Acesso negado")
        llm.chat.assert_not_called()

    @pytest.mark.asyncio
    async def test_debug_includes_reported_error(self, session, llm):
        handler = CodeHandler(session, llm)
        await handler.handle(_intent(IntentType.CODE, "debug", code="1/0", error="ZeroDivisionError"))
        prompt = llm.chat.call_args.args[0][-1]["content"]
        assert "O erro relatado é: ZeroDivisionError" in prompt

    @pytest.mark.asyncio
    async def test_generate_defaults_to_python(self, session, llm):
        handler = CodeHandler(session, llm)
        response = await handler.handle(_intent(IntentType.CODE, "generate", description="validar e-mails"))
        assert response.startswith("Código gerado para: validar e-mails")
        assert llm.chat.call_args.args[0][-1]["content"] == "Gere código Python para: validar e-mails"

    @pytest.mark.asyncio
    async def test_execute_runs_snippet(self, session, llm):
        handler = CodeHandler(session, llm)
        response = await handler.handle(_intent(IntentType.CODE, "execute", code="```python\nprint(2 + 3)\n```"))
        assert response.startswith("Resultado da execução:")
        assert "5" in response

    @pytest.mark.asyncio
    async def test_execute_reports_failure(self, session, llm):
        handler = CodeHandler(session, llm)
        response = await handler.handle(_intent(IntentType.CODE, "execute", code="raise SystemExit(3)"))
        assert response.startswith("Erro na execução (código 3)")


class TestTaskHandler:
    """task.* actions over a temporary project root."""

    @pytest.fixture
    def handler(self, session):
        return TaskHandler(session)

    @pytest.mark.asyncio
    async def test_create_list_select_delete(self, handler, session):
        create = _intent(IntentType.TASK, "create", title="Implementar login", milestone="Sprint 1")
        response = await handler.handle(create)
        assert response.startswith('✅ Tarefa "Implementar login" criada com sucesso!')
        task_id = create.parameters["taskId"]
        assert list((session.root / ".task" / "issues").glob(f"{task_id}-implementar-login.json"))

        listing = await handler.handle(_intent(IntentType.TASK, "list"))
        assert "- Implementar login (todo) [Sprint: Sprint 1]" in listing

        select = _intent(IntentType.TASK, "select", taskId=str(task_id))
        selected = await handler.handle(select)
        assert selected.startswith('✅ Tarefa selecionada: "Implementar login"')
        assert select.parameters["taskId"] == task_id

        deleted = await handler.handle(_intent(IntentType.TASK, "delete", taskId=task_id))
        assert "foi marcada como excluída" in deleted
        assert await handler.handle(_intent(IntentType.TASK, "list")) == "Nenhuma tarefa ativa encontrada."

    @pytest.mark.asyncio
    async def test_update_renames_on_title_change(self, handler, session):
        create = _intent(IntentType.TASK, "create", title="Antigo")
        await handler.handle(create)
        task_id = create.parameters["taskId"]

        response = await handler.handle(
            _intent(IntentType.TASK, "update", taskId=task_id, title="Novo título", status="in_progress")
        )

        assert "Título: Novo título" in response
        assert "Status: in_progress" in response
        names = [p.name for p in (session.root / ".task" / "issues").glob("*.json")]
        assert names == [f"{task_id}-novo-título.json"]

    @pytest.mark.asyncio
    async def test_unknown_task(self, handler):
        response = await handler.handle(_intent(IntentType.TASK, "select", taskId="999"))
        assert response == "Tarefa com ID 999 não encontrada."

    @pytest.mark.asyncio
    async def test_sync_returns_guidance(self, handler):
        assert await handler.handle(_intent(IntentType.TASK, "sync")) == SYNC_GUIDANCE


class TestGitHubHandler:
    """github.* actions against a mocked transport."""

    @staticmethod
    def _client(handler_fn):
        return GitHubClient(
            token="token",
            owner="acme",
            repo="app",
            transport=httpx.MockTransport(handler_fn),
        )

    @pytest.mark.asyncio
    async def test_list_issues_skips_pull_requests(self, session):
        def respond(request):
            assert request.url.path == "/repos/acme/app/issues"
            assert request.headers["Authorization"] == "Bearer token"
            return httpx.Response(200, json=[
                {"number": 1, "title": "Bug no login", "state": "open"},
                {"number": 2, "title": "PR", "state": "open", "pull_request": {}},
            ])

        handler = GitHubHandler(session, self._client(respond))
        response = await handler.handle(_intent(IntentType.GITHUB, "list_issues"))
        assert response == "Issues encontradas no GitHub (1):\n\n- #1: Bug no login (open)"

    @pytest.mark.asyncio
    async def test_list_projects_uses_graphql(self, session):
        def respond(request):
            assert request.url.path == "/graphql"
            return httpx.Response(200, json={
                "data": {"repository": {"projectsV2": {"nodes": [{"id": "PVT_1", "title": "Roadmap"}]}}}
            })

        handler = GitHubHandler(session, self._client(respond))
        response = await handler.handle(_intent(IntentType.GITHUB, "list_projects"))
        assert "- Roadmap (ID: PVT_1)" in response

    @pytest.mark.asyncio
    async def test_http_error_becomes_message(self, session):
        handler = GitHubHandler(session, self._client(lambda request: httpx.Response(500)))
        response = await handler.handle(_intent(IntentType.GITHUB, "list_milestones"))
        assert response.startswith("Erro ao listar milestones do GitHub:")

    @pytest.mark.asyncio
    async def test_unconfigured(self, session, monkeypatch):
        for name in ("GITHUB_TOKEN", "GITHUB_OWNER", "GITHUB_REPO"):
            monkeypatch.delenv(name, raising=False)
        handler = GitHubHandler(session, GitHubClient())

        response = await handler.handle(_intent(IntentType.GITHUB, "list_issues"))
        assert "GitHub não configurado" in response

        info = await handler.handle(_intent(IntentType.GITHUB, "info"))
        assert "❌ Não configurado" in info
