import json
import re

from .base import LLMProvider

# (pattern, title, severity, cwe, owasp, remediation)
_MOCK_RULES = [
    (
        re.compile(r"\beval\s*\(|\bexec\s*\("),
        "Dynamic code execution",
        "Critical",
        "CWE-95",
        "A03:2021-Injection",
        "Avoid eval/exec on untrusted input",
    ),
    (
        re.compile(r"SELECT\s.+\+|f[\"']SELECT", re.IGNORECASE),
        "Possible SQL injection",
        "High",
        "CWE-89",
        "A03:2021-Injection",
        "Use parameterized queries",
    ),
    (
        re.compile(r"(password|secret|api_key)\s*=\s*[\"'][^\"']+[\"']", re.IGNORECASE),
        "Hardcoded credential",
        "High",
        "CWE-798",
        "A07:2021-Identification and Authentication Failures",
        "Load secrets from the environment or a secret manager",
    ),
    (
        re.compile(r"\bmd5\b|\bsha1\b", re.IGNORECASE),
        "Weak hash algorithm",
        "Medium",
        "CWE-327",
        "A02:2021-Cryptographic Failures",
        "Use SHA-256 or a password hashing function",
    ),
]

_SEVERITY_PENALTY = {"Critical": 40, "High": 25, "Medium": 10, "Low": 5}


class MockLLMProvider(LLMProvider):
    """Mock LLM for development and testing."""

    name = "mock"

    async def complete(self, prompt: str) -> str:
        """Return a canned audit based on simple keyword detection."""
        if "Package.json:" in prompt:
            return json.dumps({
                "vulnerablePackages": [],
                "outdatedPackages": [],
                "suspiciousPackages": [],
                "supplyChainRisks": "Mock analysis: no supply chain data available",
                "recommendations": ["Run npm audit for an authoritative report"],
            })

        vulnerabilities = []
        for pattern, title, severity, cwe, owasp, remediation in _MOCK_RULES:
            match = pattern.search(prompt)
            if match:
                line_number = prompt.count("\n", 0, match.start()) + 1
                vulnerabilities.append({
                    "title": title,
                    "description": f"Mock detection of {title.lower()}",
                    "severity": severity,
                    "remediation": remediation,
                    "lineNumber": line_number,
                    "cweId": cwe,
                    "owaspCategory": owasp,
                })

        penalty = sum(_SEVERITY_PENALTY[v["severity"]] for v in vulnerabilities)
        score = max(0, 100 - penalty)
        return "Mock audit result:\n" + json.dumps({
            "overallRiskScore": score,
            "soc2Controls": ["CC6.1", "CC7.1"] if vulnerabilities else [],
            "vulnerabilities": vulnerabilities,
            "executiveSummary": f"Mock analysis found {len(vulnerabilities)} issue(s)",
        })
