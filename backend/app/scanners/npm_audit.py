# backend/app/scanners/npm_audit.py
"""
npm security audit
Submits a dependency set to the registry's bulk audit endpoint and normalizes
the response into severity counts plus advisory, finding and action records
"""

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

import httpx

from app.core.config import settings
from app.core.constants import AUDIT_SUBPATH, SEVERITY_ORDER
from app.core.logging import logger
from app.scanners.manifest_parser import clean_version
from app.scanners.version_resolver import coerce_version


@dataclass
class SeverityCount:
    severity: str
    count: int = 0


@dataclass
class AdvisoryFindingRecord:
    version: Optional[str]
    paths: List[str] = field(default_factory=list)


@dataclass
class AdvisoryRecord:
    id: str
    module_name: str
    title: Optional[str] = None
    severity: Optional[str] = None
    vulnerable_versions: Optional[str] = None
    recommendation: Optional[str] = None
    url: Optional[str] = None
    cves: List[str] = field(default_factory=list)
    cvss_score: float = 0
    findings: List[AdvisoryFindingRecord] = field(default_factory=list)


@dataclass
class ActionRecord:
    action: Optional[str]
    module: Optional[str]
    target: Optional[str] = None
    is_major: bool = False
    resolves: List[str] = field(default_factory=list)


@dataclass
class AuditReport:
    """Per-severity counts, ordered info..critical.

    detailed_advisories and recommended_actions stay None unless the audit
    service returned them.
    """
    counts: List[SeverityCount]
    detailed_advisories: Optional[List[AdvisoryRecord]] = None
    recommended_actions: Optional[List[ActionRecord]] = None

    def __iter__(self):
        return iter(self.counts)

    def __len__(self):
        return len(self.counts)


def empty_report() -> AuditReport:
    return AuditReport(counts=[SeverityCount(severity=s, count=0) for s in SEVERITY_ORDER])


def _as_int(value: Any) -> int:
    try:
        return int(value)
    except (TypeError, ValueError):
        return 0


def _as_float(value: Any) -> float:
    try:
        return float(value)
    except (TypeError, ValueError):
        return 0


class VulnerabilityAuditor:
    """Vulnerability auditor backed by the npm registry audit API"""

    def __init__(
        self,
        registry_url: Optional[str] = None,
        timeout: Optional[float] = None,
        client: Optional[httpx.AsyncClient] = None,
    ):
        self.registry_url = (registry_url or settings.NPM_REGISTRY_URL).rstrip("/")
        self.timeout = timeout if timeout is not None else settings.AUDIT_TIMEOUT_SECONDS
        self._client = client

    @property
    def audit_url(self) -> str:
        return f"{self.registry_url}{AUDIT_SUBPATH}"

    def build_payload(self, dependencies: Dict[str, str]) -> Optional[Dict[str, Any]]:
        """Coerce declared ranges to concrete versions; None if nothing survives"""
        requires: Dict[str, str] = {}
        for name, declared in dependencies.items():
            version = coerce_version(clean_version(declared)) if isinstance(declared, str) else None
            if version:
                requires[name] = version

        if not requires:
            return None

        return {
            "name": "nodecheck-audit",
            "version": "1.0.0",
            "requires": requires,
            "dependencies": {name: {"version": version} for name, version in requires.items()},
        }

    async def audit(self, dependencies: Dict[str, str]) -> AuditReport:
        """Audit a name -> declared range mapping. Never raises."""
        if not dependencies:
            return empty_report()

        payload = self.build_payload(dependencies)
        if payload is None:
            logger.info("Audit skipped: no dependency version could be coerced")
            return empty_report()

        try:
            if self._client is not None:
                response = await self._client.post(self.audit_url, json=payload, timeout=self.timeout)
            else:
                async with httpx.AsyncClient(timeout=self.timeout) as client:
                    response = await client.post(self.audit_url, json=payload)
            response.raise_for_status()
            data = response.json()
        except httpx.HTTPStatusError as e:
            logger.warning(f"npm audit returned HTTP {e.response.status_code}")
            return empty_report()
        except httpx.HTTPError as e:
            logger.warning(f"npm audit request failed: {e}")
            return empty_report()
        except ValueError as e:
            logger.warning(f"npm audit returned malformed JSON: {e}")
            return empty_report()

        try:
            report = self.parse_response(data)
        except (AttributeError, TypeError) as e:
            logger.warning(f"npm audit response has an unexpected shape: {e}")
            return empty_report()

        logger.info(
            "npm audit completed",
            extra={"counts": {c.severity: c.count for c in report.counts}},
        )
        return report

    def parse_response(self, data: Dict[str, Any]) -> AuditReport:
        """Counts come from metadata alone; a bad advisory or action entry is skipped, never the counts"""
        vulnerabilities = (data.get("metadata") or {}).get("vulnerabilities") or {}
        report = AuditReport(
            counts=[
                SeverityCount(severity=s, count=_as_int(vulnerabilities.get(s, 0)))
                for s in SEVERITY_ORDER
            ]
        )

        advisories = _entries(data.get("advisories"))
        if advisories is not None:
            report.detailed_advisories = [
                record for record in (
                    self._parse_entry(_advisory_record, adv, "advisory") for adv in advisories
                ) if record is not None
            ]

        actions = _entries(data.get("actions"))
        if actions is not None:
            report.recommended_actions = [
                record for record in (
                    self._parse_entry(_action_record, action, "action") for action in actions
                ) if record is not None
            ]

        return report

    def _parse_entry(self, parse, entry: Any, kind: str):
        try:
            return parse(entry)
        except (AttributeError, TypeError, ValueError) as e:
            logger.warning(f"npm audit: skipping malformed {kind} entry: {e}")
            return None


def _entries(value: Any) -> Optional[List[Any]]:
    if value is None:
        return None
    if isinstance(value, dict):
        return list(value.values())
    if isinstance(value, list):
        return value
    logger.warning(f"npm audit: ignoring detail list of type {type(value).__name__}")
    return None


def _advisory_record(adv: Dict[str, Any]) -> AdvisoryRecord:
    cvss = adv.get("cvss")
    score = cvss.get("score") if isinstance(cvss, dict) else cvss
    return AdvisoryRecord(
        id=str(adv.get("id")),
        module_name=adv.get("module_name"),
        title=adv.get("title"),
        severity=adv.get("severity"),
        vulnerable_versions=adv.get("vulnerable_versions"),
        recommendation=adv.get("recommendation"),
        url=adv.get("url"),
        cves=list(adv.get("cves") or []),
        cvss_score=_as_float(score),
        findings=[
            AdvisoryFindingRecord(
                version=finding.get("version"),
                paths=list(finding.get("paths") or []),
            )
            for finding in adv.get("findings") or []
            if isinstance(finding, dict)
        ],
    )


def _action_record(action: Dict[str, Any]) -> ActionRecord:
    return ActionRecord(
        action=action.get("action"),
        module=action.get("module"),
        target=action.get("target"),
        is_major=bool(action.get("isMajor", False)),
        resolves=[
            str(r.get("id") if isinstance(r, dict) else r)
            for r in action.get("resolves") or []
        ],
    )
