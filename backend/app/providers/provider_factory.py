# backend/app/providers/provider_factory.py
from typing import Any, Callable, Dict, List, Optional, Protocol

from app.core.exceptions import UnsupportedProvider
from app.providers.github_provider import GitHubProvider


class RepositoryHostClient(Protocol):
    """Capabilities the pipeline needs from a source hosting provider"""

    async def list_repos(self) -> List[Dict[str, Any]]:
        ...

    async def get_file(self, owner: str, repo: str, path: str, ref: Optional[str] = None) -> str:
        ...

    async def create_commit(
        self, owner: str, repo: str, branch: str, file_path: str, content: str, message: str
    ) -> Dict[str, Any]:
        ...


# New providers register a constructor here (gitlab, bitbucket, ...)
PROVIDERS: Dict[str, Callable[[str], RepositoryHostClient]] = {
    GitHubProvider.provider: GitHubProvider,
}


def get_provider(provider_type: str, token: str) -> RepositoryHostClient:
    """Get a hosting provider client for a provider tag"""
    factory = PROVIDERS.get((provider_type or "").lower())
    if factory is None:
        raise UnsupportedProvider(f"Unsupported provider type: {provider_type}")
    return factory(token)
