# backend/app/providers/__init__.py
from app.providers.github_provider import GitHubProvider
from app.providers.provider_factory import PROVIDERS, RepositoryHostClient, get_provider

__all__ = [
    "GitHubProvider",
    "PROVIDERS",
    "RepositoryHostClient",
    "get_provider",
]
