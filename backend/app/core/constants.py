# backend/app/core/constants.py
from enum import Enum
from typing import List


class SeverityLevel(str, Enum):
    INFO = "info"
    LOW = "low"
    MODERATE = "moderate"
    HIGH = "high"
    CRITICAL = "critical"


class RepositoryStatus(str, Enum):
    GREEN = "green"
    YELLOW = "yellow"
    RED = "red"


class GitProviderType(str, Enum):
    GITHUB = "github"


# Audit buckets in persisted order
SEVERITY_ORDER: List[str] = [
    SeverityLevel.INFO.value,
    SeverityLevel.LOW.value,
    SeverityLevel.MODERATE.value,
    SeverityLevel.HIGH.value,
    SeverityLevel.CRITICAL.value,
]

# Sentinel stored when the registry lookup fails
UNKNOWN_VERSION = "unknown"

# Characters stripped from a declared range to get the current version
RANGE_MARKERS = "^~>=<"

AUDIT_SUBPATH = "/-/npm/v1/security/audits"
