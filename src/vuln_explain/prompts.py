"""Prompt builders for the three audit operations."""

_AUDIT_RESULT_FORMAT = """{
  "overallRiskScore": <0-100 where 100=safe 0=critical>,
  "riskLevel": "<Critical|High|Medium|Low|Safe>",
  "soc2Controls": ["<control>", ...],
  "vulnerabilities": [
    {
      "title": "<title>",
      "description": "<description>",
      "severity": "<Critical|High|Medium|Low>",
      "remediation": "<fix>",
      "lineNumber": <number or null>,
      "cweId": "<CWE-ID>",
      "owaspCategory": "<category>"
    }
  ],
  "executiveSummary": "<summary>"
}"""

_NO_FINANCIALS = (
    "IMPORTANT: Do NOT estimate financial impact - it is calculated separately "
    "from the risk score."
)


def build_code_prompt(code: str) -> str:
    return f"""Act as a Senior Security Engineer and SOC 2 Compliance Officer.
Audit the following code for security risks and respond ONLY with valid JSON.

Tasks:
1. Identify vulnerabilities (OWASP Top 10, CWE).
2. Map findings to SOC 2 Trust Services Criteria.
3. Provide remediation recommendations.

{_NO_FINANCIALS}

Return ONLY valid JSON in this exact format:
{_AUDIT_RESULT_FORMAT}

Code to audit:
```
{code}
```"""


def build_repository_prompt(repo_url: str, repo_content: str) -> str:
    return f"""Act as a Senior Security Engineer and SOC 2 Compliance Officer.
Perform a comprehensive security audit of the following GitHub repository ({repo_url}) \
and respond ONLY with valid JSON.

Tasks:
1. Identify all security vulnerabilities (OWASP Top 10, CWE, dependency issues).
2. Map findings to SOC 2 Trust Services Criteria.
3. Provide a remediation plan.

{_NO_FINANCIALS}

Return ONLY valid JSON in this format:
{_AUDIT_RESULT_FORMAT}

Repository Information:
```
{repo_content}
```"""


def build_dependency_prompt(package_json: str) -> str:
    return f"""Act as a Security Expert specializing in dependency and supply chain security.
Analyze the following package.json file for security risks and respond ONLY with valid JSON.

Tasks:
1. Identify dependencies with known vulnerabilities.
2. Flag outdated or unmaintained packages.
3. Check for suspicious packages.
4. Assess supply chain risks.

Return ONLY valid JSON in this format:
{{
  "vulnerablePackages": ["<package>", ...],
  "outdatedPackages": ["<package>", ...],
  "suspiciousPackages": ["<package>", ...],
  "supplyChainRisks": "<assessment>",
  "recommendations": ["<recommendation>", ...]
}}

Package.json:
```
{package_json}
```"""
