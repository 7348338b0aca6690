#!/usr/bin/env python3
"""
Sandbox entrypoint for vuln-explain.
Reads audit parameters from stdin JSON, runs one audit, outputs JSON to stdout.
"""

import asyncio
import json
import logging
import sys
from pathlib import Path

sys.path.insert(0, str(Path(__file__).parent / "src"))

from vuln_explain.auditor import AuditService
from vuln_explain.config import Settings
from vuln_explain.errors import AuditError

logging.basicConfig(level=logging.INFO, stream=sys.stderr)
logger = logging.getLogger(__name__)


async def _run_audit(service: AuditService, input_data: dict) -> dict:
    code = input_data.get("code")
    repo_url = input_data.get("repo_url") or input_data.get("repoUrl")
    package_json = input_data.get("package_json") or input_data.get("packageJson")

    if code:
        result = await service.audit_code(code)
    elif repo_url:
        result = await service.audit_repository(repo_url)
    else:
        result = await service.audit_dependencies(package_json)
    return result.model_dump(by_alias=True, exclude_none=True, mode="json")


def main() -> None:
    try:
        input_data = json.load(sys.stdin)
    except json.JSONDecodeError as e:
        print(json.dumps({"error": f"Invalid JSON input: {e}"}))
        sys.exit(1)

    if not isinstance(input_data, dict) or not any(
        input_data.get(key)
        for key in ("code", "repo_url", "repoUrl", "package_json", "packageJson")
    ):
        print(
            json.dumps(
                {
                    "error": "Missing required input. Provide 'code', 'repo_url' or 'package_json'",
                    "examples": {
                        "code": {"code": "eval(input())"},
                        "repository": {"repo_url": "https://github.com/user/repo"},
                        "dependencies": {"package_json": "{\"dependencies\": {}}"},
                    },
                }
            )
        )
        sys.exit(1)

    try:
        service = AuditService.from_settings(Settings.from_env())
        print(json.dumps(asyncio.run(_run_audit(service, input_data))))
    except AuditError as e:
        logger.error(f"Audit failed ({type(e).__name__}): {e.message}")
        print(json.dumps({"error": e.message}))
        sys.exit(1)


if __name__ == "__main__":
    main()
