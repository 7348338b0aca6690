"""Audit orchestration: prompt, model call, JSON extraction, enrichment, caching."""

import logging

from pydantic import ValidationError as PydanticValidationError

from .cache import TTLCache
from .config import Settings
from .errors import MalformedResponseError, ValidationError
from .github import GitHubFetcher, parse_github_url
from .impact import estimate_impact, severity_band
from .llm import LLMProvider, get_provider
from .models import AuditResult, DependencyAuditResult, SourceType, utc_now_iso
from .parsing import parse_json_response
from .prompts import build_code_prompt, build_dependency_prompt, build_repository_prompt

logger = logging.getLogger(__name__)

REPO_CACHE_NAMESPACE = "repo"

# Fields the service sets itself; model-supplied values are dropped
MODEL_IGNORED_FIELDS = frozenset(
    {
        "estimatedFinancialImpactINR",
        "estimated_financial_impact_inr",
        "cached",
        "sourceType",
        "source_type",
        "repository",
        "analyzedAt",
        "analyzed_at",
    }
)


class AuditService:
    """Runs the three audit operations against injected collaborators.

    The cache is shared by every request handled by this service and is only
    used for repository audits.
    """

    def __init__(
        self,
        provider: LLMProvider,
        fetcher: GitHubFetcher,
        cache: TTLCache,
        cache_ttl: float | None = None,
    ):
        self.provider = provider
        self.fetcher = fetcher
        self.cache = cache
        self.cache_ttl = cache_ttl

    @classmethod
    def from_settings(cls, settings: Settings) -> "AuditService":
        """Wire the default collaborators from settings."""
        return cls(
            provider=get_provider(settings),
            fetcher=GitHubFetcher(
                token=settings.github_token,
                api_url=settings.github_api_url,
                raw_url=settings.github_raw_url,
                max_files=settings.max_repo_files,
                preview_chars=settings.file_preview_chars,
                timeout=settings.http_timeout_seconds,
            ),
            cache=TTLCache(default_ttl=settings.cache_ttl_seconds),
            cache_ttl=settings.cache_ttl_seconds,
        )

    @staticmethod
    def repo_cache_key(repo_url: str) -> str:
        return TTLCache.compute_key(f"{REPO_CACHE_NAMESPACE}:{repo_url}")

    async def audit_code(self, code: str | None) -> AuditResult:
        """Audit a code snippet. Snippet audits are never cached."""
        if not code or not code.strip():
            raise ValidationError("Code content cannot be empty")

        response_text = await self.provider.complete(build_code_prompt(code))
        result = _to_audit_result(parse_json_response(response_text))
        result.source_type = SourceType.CODE_SNIPPET
        return enrich(result)

    async def audit_repository(self, repo_url: str | None) -> AuditResult:
        """Audit a GitHub repository, serving repeated URLs from the cache."""
        if not repo_url or not repo_url.strip():
            raise ValidationError("Repository URL cannot be empty")
        repo_url = repo_url.strip()
        parse_github_url(repo_url)

        cache_key = self.repo_cache_key(repo_url)
        cached = self.cache.get(cache_key)
        if cached is not None:
            logger.info(f"[CACHE HIT] Returning cached result for {repo_url}")
            cached.cached = True
            return cached

        repo_content = await self.fetcher.fetch_repository_sample(repo_url)
        response_text = await self.provider.complete(
            build_repository_prompt(repo_url, repo_content)
        )
        result = _to_audit_result(parse_json_response(response_text))
        result.source_type = SourceType.GITHUB_REPOSITORY
        result.repository = repo_url
        result = enrich(result)

        self.cache.put(cache_key, result, self.cache_ttl)
        return result

    async def audit_dependencies(self, package_json: str | None) -> DependencyAuditResult:
        """Audit a package.json manifest for supply-chain risk."""
        if not package_json or not package_json.strip():
            raise ValidationError("Package.json content is required")

        response_text = await self.provider.complete(build_dependency_prompt(package_json))
        data = parse_json_response(response_text)
        try:
            result = DependencyAuditResult.model_validate(data)
        except PydanticValidationError as e:
            logger.warning(f"Rejected dependency audit result: {e}")
            raise MalformedResponseError("Unexpected dependency audit shape") from e
        result.analyzed_at = utc_now_iso()
        return result


def enrich(result: AuditResult) -> AuditResult:
    """Inject the financial impact estimate and analysis timestamp."""
    count = len(result.vulnerabilities)
    result.estimated_financial_impact_inr = estimate_impact(result.overall_risk_score, count)
    result.analyzed_at = utc_now_iso()

    worst = max(result.vulnerabilities, key=lambda v: v.severity.rank, default=None)
    logger.info(
        f"Audit scored {result.overall_risk_score} "
        f"({severity_band(100 - result.overall_risk_score)} band, {count} vulnerabilities, "
        f"worst {worst.severity.value if worst else 'none'}): "
        f"INR {result.estimated_financial_impact_inr:,}"
    )
    return result


def _to_audit_result(data: dict) -> AuditResult:
    data = {key: value for key, value in data.items() if key not in MODEL_IGNORED_FIELDS}
    try:
        return AuditResult.model_validate(data)
    except PydanticValidationError as e:
        logger.warning(f"Rejected audit result: {e}")
        raise MalformedResponseError(
            "Unexpected audit result shape: overallRiskScore is missing or not a number"
        ) from e
