"""
GitHub handler: read-only views of the configured repository.
"""

from typing import Optional

from devtask.context.session import SessionContext
from devtask.handlers.base import BaseHandler
from devtask.intents import Intent, IntentType
from devtask.tools.github import GitHubClient
from devtask.utils.errors import GitHubError


class GitHubHandler(BaseHandler):
    """Handles `github.*` intents."""

    intent_type = IntentType.GITHUB

    def __init__(self, session: SessionContext, client: Optional[GitHubClient] = None):
        super().__init__(session)
        self.client = client or GitHubClient()
        self.actions = {
            "list_issues": self.handle_list_issues,
            "list_milestones": self.handle_list_milestones,
            "list_projects": self.handle_list_projects,
            "info": self.handle_info,
        }

    async def handle_list_issues(self, intent: Intent) -> str:
        try:
            issues = await self.client.fetch_issues(intent.get_param("state", default="all"))
        except GitHubError as exc:
            return f"Erro ao listar issues do GitHub: {exc}"
        if not issues:
            return "Nenhuma issue encontrada no GitHub."
        lines = "\n".join(f"- #{issue['number']}: {issue['title']} ({issue['state']})" for issue in issues)
        return f"Issues encontradas no GitHub ({len(issues)}):\n\n{lines}"

    async def handle_list_milestones(self, intent: Intent) -> str:
        try:
            milestones = await self.client.fetch_milestones()
        except GitHubError as exc:
            return f"Erro ao listar milestones do GitHub: {exc}"
        if not milestones:
            return "Nenhuma milestone encontrada no GitHub."
        lines = "\n".join(f"- {name} (ID: {number})" for name, number in milestones.items())
        return f"Milestones encontradas no GitHub ({len(milestones)}):\n\n{lines}"

    async def handle_list_projects(self, intent: Intent) -> str:
        try:
            projects = await self.client.fetch_projects()
        except GitHubError as exc:
            return f"Erro ao listar projetos do GitHub: {exc}"
        if not projects:
            return "Nenhum projeto encontrado no GitHub."
        lines = "\n".join(f"- {name} (ID: {node_id})" for name, node_id in projects.items())
        return f"Projetos encontrados no GitHub ({len(projects)}):\n\n{lines}"

    async def handle_info(self, intent: Intent) -> str:
        client = self.client
        output = [
            "# Informações do GitHub",
            "",
            "## Configuração",
            f"- Token: {'✅ Configurado' if client.token else '❌ Não configurado'}",
            f"- Proprietário: {client.owner or 'Não configurado'}",
            f"- Repositório: {client.repo or 'Não configurado'}",
            "",
        ]

        if client.configured:
            try:
                milestones = await client.fetch_milestones()
                output.append(f"## Milestones ({len(milestones)})")
                output += [f"- {name} (ID: {number})" for name, number in milestones.items()] or ["Nenhuma milestone encontrada."]
            except GitHubError as exc:
                output.append(f"Erro ao buscar milestones: {exc}")
            output.append("")

            try:
                projects = await client.fetch_projects()
                output.append(f"## Projetos ({len(projects)})")
                output += [f"- {name} (ID: {node_id})" for name, node_id in projects.items()] or ["Nenhum projeto encontrado."]
            except GitHubError as exc:
                output.append(f"Erro ao buscar projetos: {exc}")
            output.append("")

        output += [
            "## Recomendações",
            "- Defina GITHUB_TOKEN, GITHUB_OWNER e GITHUB_REPO no arquivo .env",
            "- Certifique-se de que seu token tem os escopos necessários (repo, project)",
        ]
        return "\n".join(output)
