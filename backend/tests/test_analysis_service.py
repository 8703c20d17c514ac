# tests/test_analysis_service.py
"""
Analysis pipeline tests
Tests: dependency rows, audit persistence, status, batch failure handling
"""

import json
import httpx
import pytest
from unittest.mock import AsyncMock, Mock, patch
from uuid import uuid4
from sqlalchemy.exc import SQLAlchemyError

from app.core.exceptions import BadRequest, Unauthenticated
from app.db.models.repository import Repository
from app.db.repositories.audit_repository import AuditRepository
from app.db.repositories.dependency_repository import DependencyRepository
from app.db.repositories.repository_repository import RepositoryRepository
from app.scanners.npm_audit import VulnerabilityAuditor
from app.services.analysis_service import AnalysisService
from app.services.repository_service import RepositoryService

from fakes import AUDIT_RESPONSE, FakeProvider

LATEST_VERSIONS = {"left-pad": "1.3.0", "jest": "29.7.0"}

MANIFEST = json.dumps({
    "name": "web-app",
    "dependencies": {"left-pad": "^1.0.0", "express": "~4.17.1"},
    "devDependencies": {"jest": "^27.0.0"},
})


def _resolver():
    resolver = Mock()
    resolver.get_latest_version = AsyncMock(side_effect=lambda name: LATEST_VERSIONS.get(name))
    return resolver


def _auditor(body=None, status_code=200):
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(status_code, json=body if body is not None else AUDIT_RESPONSE)

    client = httpx.AsyncClient(transport=httpx.MockTransport(handler))
    return VulnerabilityAuditor(registry_url="https://registry.test", client=client)


async def _add_repository(db_session, full_name: str) -> Repository:
    return await RepositoryRepository(db_session).create({
        "name": full_name.split("/")[1],
        "full_name": full_name,
        "url": f"https://github.com/{full_name}",
        "provider": "github",
        "default_branch": "main",
    })


@pytest.fixture
def provider() -> FakeProvider:
    return FakeProvider(files={"acme/web-app/package.json": MANIFEST})


@pytest.fixture
def service(db_session, provider) -> AnalysisService:
    return AnalysisService(db_session, provider, resolver=_resolver(), auditor=_auditor())


class TestAnalyzeRepository:
    """Test the per-repository pipeline"""

    @pytest.mark.asyncio
    async def test_dependency_rows(self, db_session, service, test_repository):
        assert await service.analyze_repository(test_repository.id) is True

        rows = await DependencyRepository(db_session).get_by_repository(test_repository.id)
        by_name = {row.package_name: row for row in rows}

        assert set(by_name) == {"left-pad", "express", "jest"}

        assert by_name["left-pad"].current_version == "1.0.0"
        assert by_name["left-pad"].latest_version == "1.3.0"
        assert by_name["left-pad"].recommended_version == "1.2.0"

        # Failed lookup
        assert by_name["express"].current_version == "4.17.1"
        assert by_name["express"].latest_version == "unknown"
        assert by_name["express"].recommended_version == "4.17.1"

        assert by_name["jest"].recommended_version == "29.6.0"

    @pytest.mark.asyncio
    async def test_audit_results_and_status(self, db_session, service, test_repository):
        await service.analyze_repository(test_repository.id)

        results = await AuditRepository(db_session).get_latest_with_advisories(test_repository.id)
        assert sorted(r.severity for r in results) == sorted(["info", "low", "moderate", "high", "critical"])
        assert len({r.timestamp for r in results}) == 1

        buckets = {r.severity: r for r in results}
        assert buckets["high"].count == 1

        advisories = buckets["high"].advisories
        assert len(advisories) == 1
        assert advisories[0].package_name == "left-pad"
        assert advisories[0].advisory_id == "1179"
        assert advisories[0].cves == ["CVE-2020-0001"]
        assert advisories[0].findings[0].version == "1.0.0"
        assert advisories[0].actions[0].target == "1.3.0"
        assert advisories[0].actions[0].resolves == ["1179"]

        repo = await RepositoryRepository(db_session).get(test_repository.id)
        assert repo.status == "red"
        assert repo.last_analyzed is not None

    @pytest.mark.asyncio
    async def test_reanalysis_replaces_previous_rows(self, db_session, service, test_repository):
        await service.analyze_repository(test_repository.id)
        await service.analyze_repository(test_repository.id)

        rows = await DependencyRepository(db_session).get_by_repository(test_repository.id)
        results = await AuditRepository(db_session).get_latest_with_advisories(test_repository.id)

        assert len(rows) == 3
        assert len(results) == 5
        assert sum(len(r.advisories) for r in results) == 1

    @pytest.mark.asyncio
    async def test_low_severity_advisory_links_to_low_bucket(self, db_session, provider, test_repository):
        advisory = dict(AUDIT_RESPONSE["advisories"]["1179"], severity="info")
        body = {
            "advisories": {"1179": advisory},
            "metadata": {"vulnerabilities": {"info": 1}},
        }
        service = AnalysisService(db_session, provider, resolver=_resolver(), auditor=_auditor(body))

        await service.analyze_repository(test_repository.id)

        results = await AuditRepository(db_session).get_latest_with_advisories(test_repository.id)
        buckets = {r.severity: r for r in results}
        assert len(buckets["low"].advisories) == 1
        assert buckets["info"].advisories == []

        repo = await RepositoryRepository(db_session).get(test_repository.id)
        assert repo.status == "green"

    @pytest.mark.asyncio
    async def test_action_attaches_to_every_advisory_of_its_module(self, db_session, provider, test_repository):
        moderate = dict(
            AUDIT_RESPONSE["advisories"]["1179"],
            id=1180,
            severity="moderate",
            title="Regular Expression Denial of Service",
        )
        body = dict(
            AUDIT_RESPONSE,
            advisories={"1179": AUDIT_RESPONSE["advisories"]["1179"], "1180": moderate},
            metadata={"vulnerabilities": {"moderate": 1, "high": 1}},
        )
        service = AnalysisService(db_session, provider, resolver=_resolver(), auditor=_auditor(body))

        await service.analyze_repository(test_repository.id)

        results = await AuditRepository(db_session).get_latest_with_advisories(test_repository.id)
        advisories = [adv for r in results for adv in r.advisories]

        assert sorted(adv.advisory_id for adv in advisories) == ["1179", "1180"]
        for adv in advisories:
            assert [(a.module, a.target) for a in adv.actions] == [("left-pad", "1.3.0")]

        buckets = {r.severity: r for r in results}
        assert [adv.advisory_id for adv in buckets["moderate"].advisories] == ["1180"]

    @pytest.mark.asyncio
    async def test_malformed_advisory_detail_keeps_red_status(self, db_session, provider, test_repository):
        advisory = dict(AUDIT_RESPONSE["advisories"]["1179"], cvss=7.5)
        body = dict(AUDIT_RESPONSE, advisories={"1179": advisory})
        service = AnalysisService(db_session, provider, resolver=_resolver(), auditor=_auditor(body))

        await service.analyze_repository(test_repository.id)

        repo = await RepositoryRepository(db_session).get(test_repository.id)
        assert repo.status == "red"

    @pytest.mark.asyncio
    async def test_audit_failure_still_completes(self, db_session, provider, test_repository):
        service = AnalysisService(db_session, provider, resolver=_resolver(), auditor=_auditor(status_code=500))

        assert await service.analyze_repository(test_repository.id) is True

        results = await AuditRepository(db_session).get_latest_with_advisories(test_repository.id)
        assert all(r.count == 0 for r in results)

        repo = await RepositoryRepository(db_session).get(test_repository.id)
        assert repo.status == "green"

    @pytest.mark.asyncio
    async def test_missing_manifest_is_skipped(self, db_session, service):
        repo = await _add_repository(db_session, "acme/no-manifest")

        assert await service.analyze_repository(repo.id) is False

        repo = await RepositoryRepository(db_session).get(repo.id)
        assert repo.status is None
        assert repo.last_analyzed is None

    @pytest.mark.asyncio
    async def test_unknown_repository_is_skipped(self, service):
        assert await service.analyze_repository(uuid4()) is False


class TestAnalyzeRepositories:
    """Test batch behaviour"""

    @pytest.mark.asyncio
    async def test_failures_do_not_stop_the_batch(self, db_session, service, test_repository):
        missing = await _add_repository(db_session, "acme/no-manifest")

        analyzed = await service.analyze_repositories([missing.id, test_repository.id])

        assert analyzed == 1
        repo = await RepositoryRepository(db_session).get(test_repository.id)
        assert repo.status == "red"

    @pytest.mark.asyncio
    async def test_invalid_manifest_keeps_previous_results(self, db_session, provider, service, test_repository):
        repo_id = test_repository.id
        await service.analyze_repository(repo_id)

        provider.files["acme/web-app/package.json"] = "{broken"
        analyzed = await service.analyze_repositories([repo_id])

        assert analyzed == 0
        rows = await DependencyRepository(db_session).get_by_repository(repo_id)
        assert len(rows) == 3


    @pytest.mark.asyncio
    async def test_persistence_failure_skips_only_that_repository(self, db_session, test_repository):
        api = await _add_repository(db_session, "acme/api")
        web_app_id, api_id = test_repository.id, api.id
        provider = FakeProvider(files={
            "acme/web-app/package.json": MANIFEST,
            "acme/api/package.json": MANIFEST,
        })
        service = AnalysisService(db_session, provider, resolver=_resolver(), auditor=_auditor())

        original = service.audits.create_many
        calls = []

        async def create_many_failing_once(objs_in):
            calls.append(objs_in)
            if len(calls) == 1:
                raise SQLAlchemyError("database is locked")
            return await original(objs_in)

        with patch.object(service.audits, "create_many", side_effect=create_many_failing_once):
            analyzed = await service.analyze_repositories([web_app_id, api_id])

        assert analyzed == 1

        web_app = await RepositoryRepository(db_session).get(web_app_id)
        assert web_app.status is None
        assert web_app.last_analyzed is None

        api = await RepositoryRepository(db_session).get(api_id)
        assert api.status == "red"


class TestRepositoryServiceAnalyze:

    @pytest.mark.asyncio
    async def test_summary_message(self, db_session, provider, github_token, test_repository):
        missing = await _add_repository(db_session, "acme/no-manifest")
        service = RepositoryService(
            db_session,
            provider_factory=lambda provider_type, token: provider,
            analysis_options={"resolver": _resolver(), "auditor": _auditor()},
        )

        result = await service.analyze_repositories([test_repository.id, missing.id])

        assert result == {
            "success": True,
            "message": "Successfully analyzed 1 out of 2 repositories",
        }

    @pytest.mark.asyncio
    async def test_empty_selection(self, db_session, provider, github_token):
        service = RepositoryService(db_session, provider_factory=lambda provider_type, token: provider)

        with pytest.raises(BadRequest):
            await service.analyze_repositories([])

    @pytest.mark.asyncio
    async def test_missing_token(self, db_session, provider, no_github_token):
        service = RepositoryService(db_session, provider_factory=lambda provider_type, token: provider)

        with pytest.raises(Unauthenticated):
            await service.analyze_repositories([uuid4()])
