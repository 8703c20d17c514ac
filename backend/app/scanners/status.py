# backend/app/scanners/status.py
from typing import Any, Iterable, Optional

from app.core.constants import RepositoryStatus, SeverityLevel

RED_SEVERITIES = {SeverityLevel.CRITICAL.value, SeverityLevel.HIGH.value}


def _field(result: Any, name: str) -> Any:
    if isinstance(result, dict):
        return result.get(name)
    return getattr(result, name, None)


def determine_status(audit_results: Optional[Iterable[Any]]) -> str:
    """Reduce severity counts to green / yellow / red. Low and info never count."""
    if not audit_results:
        return RepositoryStatus.GREEN.value

    has_red = False
    has_moderate = False
    for result in audit_results:
        severity = _field(result, "severity")
        if (_field(result, "count") or 0) <= 0:
            continue
        if severity in RED_SEVERITIES:
            has_red = True
        elif severity == SeverityLevel.MODERATE.value:
            has_moderate = True

    if has_red:
        return RepositoryStatus.RED.value
    if has_moderate:
        return RepositoryStatus.YELLOW.value
    return RepositoryStatus.GREEN.value
