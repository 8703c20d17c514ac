# backend/app/scanners/__init__.py
from app.scanners.manifest_parser import clean_version, load_manifest, parse_dependencies, serialize_manifest
from app.scanners.version_resolver import VersionResolver, calculate_recommended_version, coerce_version
from app.scanners.npm_audit import AuditReport, SeverityCount, VulnerabilityAuditor, empty_report
from app.scanners.status import determine_status

__all__ = [
    "clean_version",
    "load_manifest",
    "parse_dependencies",
    "serialize_manifest",
    "VersionResolver",
    "calculate_recommended_version",
    "coerce_version",
    "AuditReport",
    "SeverityCount",
    "VulnerabilityAuditor",
    "empty_report",
    "determine_status",
]
