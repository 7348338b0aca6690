"""Tests for the HTTP API."""

import json
import logging

import pytest

from vuln_explain.auditor import AuditService
from vuln_explain.errors import ConfigurationError, UpstreamError

from .fakes import audit_payload

REPO_URL = "https://github.com/acme/widgets"


class TestHealthEndpoint:
    """Test / and /health endpoints."""

    async def test_health_returns_ok(self, make_client):
        client, _ = make_client(audit_payload())
        async with client:
            response = await client.get("/health")

            assert response.status_code == 200
            assert response.json()["status"] == "ok"
            assert response.json()["aiProvider"] == "fake"

    async def test_index_lists_endpoints(self, make_client):
        client, _ = make_client(audit_payload())
        async with client:
            response = await client.get("/")

            assert response.status_code == 200
            assert response.json()["endpoints"]["auditRepo"] == "POST /api/audit-repo"


class TestAuditEndpoint:
    """Test /api/audit endpoint."""

    async def test_audit_injects_financial_impact(self, make_client):
        client, provider = make_client(
            "Sure! Here is the audit:\n" + json.dumps(audit_payload(20, 5))
        )
        async with client:
            response = await client.post("/api/audit", json={"code": "eval(input())"})

            assert response.status_code == 200
            data = response.json()
            assert data["overallRiskScore"] == 20
            assert data["estimatedFinancialImpactINR"] == 1130000
            assert data["sourceType"] == "Code Snippet"
            assert len(data["vulnerabilities"]) == 5
            assert data["vulnerabilities"][0]["cweId"] == "CWE-20"
            assert "analyzedAt" in data
            assert "cached" not in data
            assert "eval(input())" in provider.prompts[0]

    async def test_model_supplied_impact_is_replaced(self, make_client):
        client, _ = make_client(audit_payload(100, 0, estimatedFinancialImpactINR=999))
        async with client:
            response = await client.post("/api/audit", json={"code": "print(1)"})

            assert response.json()["estimatedFinancialImpactINR"] == 30000

    @pytest.mark.parametrize("body", [{"code": ""}, {"code": "   "}, {}, {"code": None}])
    async def test_empty_code_is_400(self, make_client, body):
        client, provider = make_client(audit_payload())
        async with client:
            response = await client.post("/api/audit", json=body)

            assert response.status_code == 400
            assert response.json() == {"error": "Code content cannot be empty"}
            assert provider.prompts == []

    async def test_non_json_body_is_400(self, make_client):
        client, _ = make_client(audit_payload())
        async with client:
            response = await client.post(
                "/api/audit",
                content=b"not json",
                headers={"Content-Type": "application/json"},
            )

            assert response.status_code == 400
            assert "error" in response.json()

    async def test_malformed_model_response_is_500(self, make_client):
        client, _ = make_client("I could not audit this code, sorry.")
        async with client:
            response = await client.post("/api/audit", json={"code": "print(1)"})

            assert response.status_code == 500
            assert response.json() == {"error": "Could not parse audit result as JSON"}

    async def test_wrong_shape_is_500(self, make_client):
        client, _ = make_client({"unexpected": True})
        async with client:
            response = await client.post("/api/audit", json={"code": "print(1)"})

            assert response.status_code == 500
            assert "Unexpected audit result shape" in response.json()["error"]

    @pytest.mark.parametrize(
        "finding_overrides",
        [
            {"cweId": 79},
            {"title": None},
            {"description": None},
            {"remediation": None, "owaspCategory": None},
            {"severity": "SEVERE", "lineNumber": "unknown"},
        ],
    )
    async def test_loosely_typed_findings_are_accepted(self, make_client, finding_overrides):
        payload = audit_payload(20, 5)
        payload["vulnerabilities"][0].update(finding_overrides)
        client, _ = make_client(payload)
        async with client:
            response = await client.post("/api/audit", json={"code": "print(1)"})

            assert response.status_code == 200
            data = response.json()
            assert data["estimatedFinancialImpactINR"] == 1130000
            assert len(data["vulnerabilities"]) == 5

    async def test_numeric_cwe_id_is_stringified(self, make_client):
        payload = audit_payload(20, 1)
        payload["vulnerabilities"][0]["cweId"] = 79
        client, _ = make_client(payload)
        async with client:
            response = await client.post("/api/audit", json={"code": "print(1)"})

            assert response.json()["vulnerabilities"][0]["cweId"] == "79"

    async def test_model_supplied_provenance_is_replaced(self, make_client):
        client, _ = make_client(
            audit_payload(
                20,
                5,
                sourceType="Code",
                repository=["not", "a", "url"],
                analyzedAt=12345,
            )
        )
        async with client:
            response = await client.post("/api/audit", json={"code": "print(1)"})

            assert response.status_code == 200
            data = response.json()
            assert data["sourceType"] == "Code Snippet"
            assert "repository" not in data
            assert isinstance(data["analyzedAt"], str)

    async def test_single_control_string_becomes_list(self, make_client):
        client, _ = make_client(audit_payload(20, 5, soc2Controls="CC6.1"))
        async with client:
            response = await client.post("/api/audit", json={"code": "print(1)"})

            assert response.status_code == 200
            assert response.json()["soc2Controls"] == ["CC6.1"]

    @pytest.mark.parametrize("score", [None, "high", [20]])
    async def test_non_numeric_score_is_500_without_pydantic_detail(self, make_client, score):
        client, _ = make_client(audit_payload(overallRiskScore=score))
        async with client:
            response = await client.post("/api/audit", json={"code": "print(1)"})

            assert response.status_code == 500
            error = response.json()["error"]
            assert "overallRiskScore" in error
            assert "\n" not in error
            assert "validation error" not in error

    async def test_audit_logs_worst_severity(self, make_client, caplog):
        payload = audit_payload(20, 2)
        payload["vulnerabilities"][1]["severity"] = "Critical"
        client, _ = make_client(payload)
        with caplog.at_level(logging.INFO, logger="vuln_explain.auditor"):
            async with client:
                await client.post("/api/audit", json={"code": "print(1)"})

        assert "worst Critical" in caplog.text

    async def test_upstream_error_is_500(self, make_client):
        client, _ = make_client(UpstreamError("Groq API Error: rate limit exceeded"))
        async with client:
            response = await client.post("/api/audit", json={"code": "print(1)"})

            assert response.status_code == 500
            assert response.json() == {"error": "Groq API Error: rate limit exceeded"}

    async def test_configuration_error_is_500(self, make_client):
        client, _ = make_client(ConfigurationError("GROQ_API_KEY environment variable is not set"))
        async with client:
            response = await client.post("/api/audit", json={"code": "print(1)"})

            assert response.status_code == 500
            assert "GROQ_API_KEY" in response.json()["error"]

    async def test_snippets_are_never_cached(self, make_client, cache):
        client, provider = make_client(audit_payload())
        async with client:
            await client.post("/api/audit", json={"code": "print(1)"})
            response = await client.post("/api/audit", json={"code": "print(1)"})

            assert "cached" not in response.json()
            assert len(provider.prompts) == 2
            assert len(cache) == 0


class TestAuditRepoEndpoint:
    """Test /api/audit-repo endpoint."""

    async def test_audit_repo(self, make_client, fake_fetcher):
        client, provider = make_client(audit_payload(45, 3))
        async with client:
            response = await client.post("/api/audit-repo", json={"repoUrl": REPO_URL})

            assert response.status_code == 200
            data = response.json()
            assert data["sourceType"] == "GitHub Repository"
            assert data["repository"] == REPO_URL
            assert data["estimatedFinancialImpactINR"] == 260000
            assert "cached" not in data
            assert fake_fetcher.calls == [REPO_URL]
            assert fake_fetcher.bundle in provider.prompts[0]

    async def test_second_request_served_from_cache(self, make_client, fake_fetcher, cache):
        client, provider = make_client(audit_payload(45, 3))
        async with client:
            first = await client.post("/api/audit-repo", json={"repoUrl": REPO_URL})
            second = await client.post("/api/audit-repo", json={"repoUrl": REPO_URL})

            assert second.status_code == 200
            assert second.json()["cached"] is True
            assert second.json()["estimatedFinancialImpactINR"] == (
                first.json()["estimatedFinancialImpactINR"]
            )
            assert len(fake_fetcher.calls) == 1
            assert len(provider.prompts) == 1
            # the cached copy itself is not marked
            assert cache.get(AuditService.repo_cache_key(REPO_URL)).cached is None

    async def test_distinct_repos_are_cached_separately(self, make_client, fake_fetcher):
        client, provider = make_client(audit_payload())
        async with client:
            await client.post("/api/audit-repo", json={"repoUrl": REPO_URL})
            response = await client.post(
                "/api/audit-repo", json={"repoUrl": "https://github.com/acme/gadgets"}
            )

            assert "cached" not in response.json()
            assert len(provider.prompts) == 2

    async def test_failed_audit_is_not_cached(self, make_client, cache):
        client, _ = make_client("no json at all")
        async with client:
            response = await client.post("/api/audit-repo", json={"repoUrl": REPO_URL})

            assert response.status_code == 500
            assert len(cache) == 0

    async def test_empty_url_is_400(self, make_client):
        client, _ = make_client(audit_payload())
        async with client:
            response = await client.post("/api/audit-repo", json={"repoUrl": " "})

            assert response.status_code == 400
            assert response.json() == {"error": "Repository URL cannot be empty"}

    async def test_invalid_url_is_400(self, make_client, fake_fetcher):
        client, _ = make_client(audit_payload())
        async with client:
            response = await client.post(
                "/api/audit-repo", json={"repoUrl": "https://example.com/acme"}
            )

            assert response.status_code == 400
            assert response.json() == {"error": "Invalid GitHub repository URL"}
            assert fake_fetcher.calls == []

    async def test_fetch_failure_is_500(self, make_client, fake_fetcher):
        async def fail(url):
            raise UpstreamError("Failed to fetch GitHub repository: 404 Not Found")

        fake_fetcher.fetch_repository_sample = fail
        client, _ = make_client(audit_payload())
        async with client:
            response = await client.post("/api/audit-repo", json={"repoUrl": REPO_URL})

            assert response.status_code == 500
            assert "404" in response.json()["error"]


class TestAuditDependenciesEndpoint:
    """Test /api/audit-dependencies endpoint."""

    async def test_audit_dependencies(self, make_client):
        client, provider = make_client(
            {
                "vulnerablePackages": ["lodash@4.17.20"],
                "outdatedPackages": ["request"],
                "suspiciousPackages": [],
                "supplyChainRisks": "Moderate",
                "recommendations": ["Upgrade lodash"],
            }
        )
        async with client:
            response = await client.post(
                "/api/audit-dependencies",
                json={"packageJson": '{"dependencies": {"lodash": "4.17.20"}}'},
            )

            assert response.status_code == 200
            data = response.json()
            assert data["vulnerablePackages"] == ["lodash@4.17.20"]
            assert data["supplyChainRisks"] == "Moderate"
            assert "analyzedAt" in data
            assert "estimatedFinancialImpactINR" not in data
            assert "lodash" in provider.prompts[0]

    async def test_missing_manifest_is_400(self, make_client):
        client, _ = make_client({})
        async with client:
            response = await client.post("/api/audit-dependencies", json={})

            assert response.status_code == 400
            assert response.json() == {"error": "Package.json content is required"}
