# backend/app/providers/github_provider.py
"""
GitHub hosting provider
Repository listing, file reads and single-file commits through the GitHub API
"""

import asyncio
import functools
from typing import Any, Dict, List, Optional

from github import Auth, Github, GithubException

from app.core.constants import GitProviderType
from app.core.exceptions import ProviderError
from app.core.logging import logger


def _github_error_message(e: GithubException) -> str:
    data = e.data if isinstance(e.data, dict) else {}
    return data.get("message", str(e))


class GitHubProvider:
    """RepositoryHostClient for github.com"""

    provider = GitProviderType.GITHUB.value

    def __init__(self, token: str, client: Optional[Github] = None):
        self.client = client or Github(auth=Auth.Token(token), per_page=100)

    async def _run(self, func, *args, **kwargs):
        # PyGithub is blocking; keep the event loop free while it waits on the API
        loop = asyncio.get_running_loop()
        return await loop.run_in_executor(None, functools.partial(func, *args, **kwargs))

    def _list_repos(self) -> List[Dict[str, Any]]:
        repos = self.client.get_user().get_repos(sort="updated")
        return [
            {
                "name": repo.name,
                "fullName": repo.full_name,
                "url": repo.html_url,
                "provider": self.provider,
                "defaultBranch": repo.default_branch,
            }
            for repo in repos
        ]

    async def list_repos(self) -> List[Dict[str, Any]]:
        """List all repositories accessible to the authenticated user"""
        try:
            return await self._run(self._list_repos)
        except GithubException as e:
            message = _github_error_message(e)
            logger.error(f"GitHubProvider: Error fetching repositories: {message}")
            raise ProviderError(f"Failed to fetch repositories: {message}") from e

    def _get_file(self, owner: str, repo: str, path: str, ref: Optional[str]) -> str:
        repository = self.client.get_repo(f"{owner}/{repo}")
        if ref:
            contents = repository.get_contents(path, ref=ref)
        else:
            contents = repository.get_contents(path)

        if isinstance(contents, list) or contents.type != "file":
            raise ProviderError(f"{path} is not a file")

        return contents.decoded_content.decode("utf-8")

    async def get_file(self, owner: str, repo: str, path: str, ref: Optional[str] = None) -> str:
        """Get decoded file content from a repository"""
        try:
            return await self._run(self._get_file, owner, repo, path, ref)
        except GithubException as e:
            message = _github_error_message(e)
            logger.warning(f"GitHubProvider: Error fetching file {path} from {owner}/{repo}: {message}")
            raise ProviderError(f"Failed to fetch file: {message}") from e

    def _create_commit(
        self, owner: str, repo: str, branch: str, file_path: str, content: str, message: str
    ) -> Dict[str, Any]:
        repository = self.client.get_repo(f"{owner}/{repo}")
        current = repository.get_contents(file_path, ref=branch)
        result = repository.update_file(
            file_path,
            message,
            content,
            current.sha,
            branch=branch,
        )
        commit = result["commit"]
        return {
            "success": True,
            "commitUrl": commit.html_url,
            "sha": commit.sha,
        }

    async def create_commit(
        self, owner: str, repo: str, branch: str, file_path: str, content: str, message: str
    ) -> Dict[str, Any]:
        """Replace one file on a branch with a single commit"""
        try:
            return await self._run(self._create_commit, owner, repo, branch, file_path, content, message)
        except GithubException as e:
            error = _github_error_message(e)
            logger.error(f"GitHubProvider: Error creating commit in {owner}/{repo}: {error}")
            raise ProviderError(f"Failed to create commit: {error}") from e
