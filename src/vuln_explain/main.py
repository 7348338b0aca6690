"""FastAPI application for LLM-backed security audits."""

import logging
import time

from fastapi import Depends, FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from . import __version__
from .auditor import AuditService
from .config import Settings
from .errors import AuditError
from .models import (
    AuditResult,
    CodeAuditRequest,
    DependencyAuditRequest,
    DependencyAuditResult,
    RepoAuditRequest,
)

logger = logging.getLogger(__name__)


def get_service(request: Request) -> AuditService:
    """Audit service attached to the running app."""
    return request.app.state.service


def create_app(
    settings: Settings | None = None,
    service: AuditService | None = None,
) -> FastAPI:
    """Create the FastAPI application.

    Args:
        settings: Service settings. Defaults to Settings.from_env().
        service: Pre-built audit service. Defaults to one wired from settings,
            which is where the shared cache lives.

    Returns:
        FastAPI application instance
    """
    settings = settings or Settings.from_env()
    service = service or AuditService.from_settings(settings)

    app = FastAPI(
        title="VulnExplain",
        description="Security audits of code snippets, GitHub repositories and npm manifests",
        version=__version__,
    )
    app.state.settings = settings
    app.state.service = service

    # CORS - allow configured frontend origins
    app.add_middleware(
        CORSMiddleware,
        allow_origins=list(settings.cors_origins),
        allow_methods=["POST", "GET"],
        allow_headers=["*"],
    )

    @app.middleware("http")
    async def log_requests(request: Request, call_next):
        start = time.perf_counter()
        response = await call_next(request)
        duration_ms = (time.perf_counter() - start) * 1000
        logger.info(
            f"{request.method} {request.url.path} - {response.status_code} - {duration_ms:.0f}ms"
        )
        return response

    @app.exception_handler(AuditError)
    async def audit_error_handler(request: Request, exc: AuditError) -> JSONResponse:
        log = logger.warning if exc.status_code < 500 else logger.error
        log(f"{request.url.path} failed ({type(exc).__name__}): {exc.message}")
        return JSONResponse(status_code=exc.status_code, content={"error": exc.message})

    @app.exception_handler(RequestValidationError)
    async def request_validation_handler(
        request: Request, exc: RequestValidationError
    ) -> JSONResponse:
        logger.warning(f"{request.url.path} rejected: malformed request body")
        return JSONResponse(status_code=400, content={"error": "Invalid request body"})

    @app.get("/")
    async def index():
        """Service description."""
        return {
            "message": "VulnExplain Backend - API Server",
            "version": __version__,
            "healthCheck": "GET /health",
            "endpoints": {
                "audit": "POST /api/audit",
                "auditRepo": "POST /api/audit-repo",
                "auditDependencies": "POST /api/audit-dependencies",
            },
        }

    @app.get("/health")
    async def health(service: AuditService = Depends(get_service)):
        """Health check endpoint."""
        return {"status": "ok", "service": "VulnExplain Backend", "aiProvider": service.provider.name}

    @app.post(
        "/api/audit",
        response_model=AuditResult,
        response_model_exclude_none=True,
    )
    async def audit(
        request: CodeAuditRequest,
        service: AuditService = Depends(get_service),
    ) -> AuditResult:
        """
        Audit a code snippet.

        - **code**: source code to audit
        """
        return await service.audit_code(request.code)

    @app.post(
        "/api/audit-repo",
        response_model=AuditResult,
        response_model_exclude_none=True,
    )
    async def audit_repo(
        request: RepoAuditRequest,
        service: AuditService = Depends(get_service),
    ) -> AuditResult:
        """
        Audit a public GitHub repository.

        - **repoUrl**: https://github.com/<owner>/<repo>
        """
        logger.info(f"Auditing repository: {request.repo_url}")
        return await service.audit_repository(request.repo_url)

    @app.post(
        "/api/audit-dependencies",
        response_model=DependencyAuditResult,
        response_model_exclude_none=True,
    )
    async def audit_dependencies(
        request: DependencyAuditRequest,
        service: AuditService = Depends(get_service),
    ) -> DependencyAuditResult:
        """
        Audit an npm package.json for supply-chain risk.

        - **packageJson**: raw package.json content
        """
        return await service.audit_dependencies(request.package_json)

    return app


def run() -> None:
    """Serve the app with uvicorn."""
    import uvicorn

    settings = Settings.from_env()
    logging.basicConfig(level=settings.log_level)
    if settings.llm_provider == "groq" and not settings.groq_api_key:
        logger.warning("GROQ_API_KEY is not set; audit requests will fail until it is configured")
    uvicorn.run(create_app(settings), host="0.0.0.0", port=settings.port)


if __name__ == "__main__":
    run()
