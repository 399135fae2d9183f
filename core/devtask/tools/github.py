"""
Read-only GitHub access: issues and milestones over REST, Projects v2 over GraphQL.
"""

from typing import Any, Optional

import httpx

from devtask.config import GITHUB_API_URL, github_settings
from devtask.utils.errors import GitHubError
from devtask.utils.logging import logger

PROJECTS_QUERY = """
query($owner: String!, $repo: String!) {
  repository(owner: $owner, name: $repo) {
    projectsV2(first: 100) {
      nodes { id title }
    }
  }
}
"""


class GitHubClient:
    """Thin async wrapper around the GitHub APIs for one repository."""

    def __init__(
        self,
        token: Optional[str] = None,
        owner: Optional[str] = None,
        repo: Optional[str] = None,
        base_url: str = GITHUB_API_URL,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        settings = github_settings()
        self.token = token or settings["token"]
        self.owner = owner or settings["owner"]
        self.repo = repo or settings["repo"]
        self.base_url = base_url
        self._transport = transport

    @property
    def configured(self) -> bool:
        return bool(self.token and self.owner and self.repo)

    def _client(self) -> httpx.AsyncClient:
        if not self.configured:
            raise GitHubError(
                "GitHub não configurado. Defina GITHUB_TOKEN, GITHUB_OWNER e GITHUB_REPO no arquivo .env."
            )
        return httpx.AsyncClient(
            base_url=self.base_url,
            headers={
                "Authorization": f"Bearer {self.token}",
                "Accept": "application/vnd.github+json",
            },
            timeout=30.0,
            transport=self._transport,
        )

    async def _get(self, path: str, params: Optional[dict] = None) -> Any:
        async with self._client() as client:
            try:
                response = await client.get(path, params=params)
                response.raise_for_status()
            except httpx.HTTPError as exc:
                logger.error(f"GitHub request failed: {exc}")
                raise GitHubError(f"Falha na requisição ao GitHub: {exc}") from exc
            return response.json()

    async def fetch_issues(self, state: str = "all") -> list[dict]:
        data = await self._get(
            f"/repos/{self.owner}/{self.repo}/issues",
            params={"state": state, "per_page": 100},
        )
        # The issues endpoint also returns pull requests
        return [issue for issue in data if "pull_request" not in issue]

    async def fetch_milestones(self) -> dict[str, int]:
        data = await self._get(
            f"/repos/{self.owner}/{self.repo}/milestones",
            params={"state": "all", "per_page": 100},
        )
        return {milestone["title"]: milestone["number"] for milestone in data}

    async def fetch_projects(self) -> dict[str, str]:
        async with self._client() as client:
            try:
                response = await client.post(
                    "/graphql",
                    json={"query": PROJECTS_QUERY, "variables": {"owner": self.owner, "repo": self.repo}},
                )
                response.raise_for_status()
            except httpx.HTTPError as exc:
                logger.error(f"GitHub GraphQL request failed: {exc}")
                raise GitHubError(f"Falha na requisição ao GitHub: {exc}") from exc
            payload = response.json()

        if payload.get("errors"):
            message = payload["errors"][0].get("message", "erro desconhecido")
            raise GitHubError(f"Erro GraphQL: {message}")

        nodes = ((payload.get("data") or {}).get("repository") or {}).get("projectsV2", {}).get("nodes", [])
        return {node["title"]: node["id"] for node in nodes if node}
