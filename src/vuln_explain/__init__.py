"""VulnExplain: LLM-backed security audits of code, repositories and npm manifests."""

__version__ = "1.0.0"
