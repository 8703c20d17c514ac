"""
NodeCheck remediation

Turns an analysis into a change on the repository: selected dependencies are
pinned to their recommended versions and committed through the hosting
provider.

Usage:
    from app.remediation import UpgradeService

    service = UpgradeService(session, provider)
    result = await service.upgrade_packages(repository_id, ["left-pad"])
    print(result["commitUrl"])
"""

from .upgrade import UpgradeService, apply_upgrades, commit_message

__all__ = [
    "UpgradeService",
    "apply_upgrades",
    "commit_message",
]
