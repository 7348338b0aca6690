"""
Financial impact estimation for audit results.

Turns a model-reported risk score (0-100, 100 = safe) and a vulnerability
count into a monetised estimate in INR. The estimate is a coarse business
signal, not an actuarial figure: severity bands step discontinuously and the
result is always a multiple of ROUNDING_STEP.
"""

from __future__ import annotations

import math

BASE_COST_INR = 50_000
ROUNDING_STEP = 10_000
MAX_COUNTED_VULNERABILITIES = 10
PER_VULNERABILITY_FACTOR = 0.1

# Low-risk findings with few vulnerabilities are capped at one lakh
LOW_RISK_SCORE_THRESHOLD = 30
LOW_RISK_MAX_VULNERABILITIES = 2
LOW_RISK_CAP_INR = 100_000

# (lower bound of vulnerability score, band label, multiplier), highest first
SEVERITY_BANDS: tuple[tuple[int, str, float], ...] = (
    (80, "critical", 15.0),
    (60, "high", 8.0),
    (40, "medium", 4.0),
    (20, "low", 2.0),
    (0, "safe", 0.5),
)


def _clamp(value: int, lo: int, hi: int) -> int:
    """Clamp an integer to [lo, hi]."""
    return max(lo, min(hi, value))


def _band(vulnerability_score: int) -> tuple[str, float]:
    for lower_bound, label, multiplier in SEVERITY_BANDS:
        if vulnerability_score >= lower_bound:
            return label, multiplier
    return SEVERITY_BANDS[-1][1], SEVERITY_BANDS[-1][2]


def severity_band(vulnerability_score: int) -> str:
    """Return the band label (critical/high/medium/low/safe) for a vulnerability score."""
    return _band(vulnerability_score)[0]


def severity_multiplier(vulnerability_score: int) -> float:
    """Return the cost multiplier for a vulnerability score."""
    return _band(vulnerability_score)[1]


def count_multiplier(vulnerability_count: int) -> float:
    """+10% per vulnerability, saturating at 2.0 for ten or more."""
    counted = min(max(vulnerability_count, 0), MAX_COUNTED_VULNERABILITIES)
    return 1 + counted * PER_VULNERABILITY_FACTOR


def round_half_up(value: float, step: int = ROUNDING_STEP) -> int:
    """Round a non-negative value to the nearest multiple of step, halves going up."""
    return int(math.floor(value / step + 0.5)) * step


def estimate_impact(risk_score: int, vulnerability_count: int) -> int:
    """
    Estimate the financial impact of an audit result.

    Args:
        risk_score: Model-reported score, 0 (critical) to 100 (safe). Values
            outside the range are clamped.
        vulnerability_count: Number of reported vulnerabilities. Negative
            values are treated as zero.

    Returns:
        Non-negative multiple of 10,000 (INR).
    """
    risk_score = _clamp(int(risk_score), 0, 100)
    vulnerability_count = max(int(vulnerability_count), 0)

    vulnerability_score = 100 - risk_score
    raw_impact = (
        BASE_COST_INR
        * severity_multiplier(vulnerability_score)
        * count_multiplier(vulnerability_count)
    )

    if (
        vulnerability_score < LOW_RISK_SCORE_THRESHOLD
        and vulnerability_count <= LOW_RISK_MAX_VULNERABILITIES
    ):
        raw_impact = min(raw_impact, LOW_RISK_CAP_INR)

    return round_half_up(raw_impact)
