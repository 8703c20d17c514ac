# backend/app/scanners/version_resolver.py
"""npm registry version lookups and the recommended-version heuristic."""

import re
from typing import Optional

import httpx

from app.core.config import settings
from app.core.logging import logger

# Strict semantic version, optional leading "v" or "="
SEMVER_RE = re.compile(
    r"^[v=]?(0|[1-9]\d*)\.(0|[1-9]\d*)\.(0|[1-9]\d*)"
    r"(?:-[0-9A-Za-z-]+(?:\.[0-9A-Za-z-]+)*)?"
    r"(?:\+[0-9A-Za-z-]+(?:\.[0-9A-Za-z-]+)*)?$"
)

# First run of up to three dot-separated numbers anywhere in the string
COERCE_RE = re.compile(r"(\d{1,16})(?:\.(\d{1,16}))?(?:\.(\d{1,16}))?")


def coerce_version(value: Optional[str]) -> Optional[str]:
    """Loosely coerce a version-ish string to "major.minor.patch", or None"""
    if not value:
        return None
    match = COERCE_RE.search(value)
    if not match:
        return None
    major, minor, patch = match.groups()
    return f"{int(major)}.{int(minor or 0)}.{int(patch or 0)}"


def calculate_recommended_version(latest_version: Optional[str]) -> Optional[str]:
    """One minor release behind latest, patch reset to zero.

    Invalid or missing input and x.0.y versions come back unchanged. The
    result is not checked against the registry, so it may never have been
    published.
    """
    if not latest_version or not isinstance(latest_version, str):
        return latest_version

    match = SEMVER_RE.match(latest_version.strip())
    if not match:
        return latest_version

    major, minor = int(match.group(1)), int(match.group(2))
    if minor == 0:
        return latest_version

    return f"{major}.{minor - 1}.0"


class VersionResolver:
    """Resolver for npm package versions"""

    def __init__(
        self,
        registry_url: Optional[str] = None,
        timeout: Optional[float] = None,
        client: Optional[httpx.AsyncClient] = None,
    ):
        self.registry_url = (registry_url or settings.NPM_REGISTRY_URL).rstrip("/")
        self.timeout = timeout if timeout is not None else settings.REGISTRY_TIMEOUT_SECONDS
        self._client = client

    async def get_latest_version(self, package_name: str) -> Optional[str]:
        """Latest published version, or None when the lookup fails for any reason"""
        url = f"{self.registry_url}/{package_name}/latest"

        try:
            if self._client is not None:
                response = await self._client.get(url, timeout=self.timeout)
            else:
                async with httpx.AsyncClient(timeout=self.timeout) as client:
                    response = await client.get(url)
            response.raise_for_status()
            data = response.json()
            version = data.get("version") if isinstance(data, dict) else None
        except httpx.HTTPStatusError as e:
            logger.warning(f"npm: HTTP {e.response.status_code} fetching latest version of {package_name}")
            return None
        except httpx.HTTPError as e:
            logger.warning(f"npm: Network error fetching latest version of {package_name}: {e}")
            return None
        except ValueError as e:
            logger.warning(f"npm: Malformed registry response for {package_name}: {e}")
            return None

        if not isinstance(version, str) or not version:
            logger.warning(f"npm: No latest version found for {package_name}")
            return None

        return version
