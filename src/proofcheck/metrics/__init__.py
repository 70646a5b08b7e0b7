"""
Anchor Proof Verifier - Metrics Module

Prometheus metrics for proof verification.

Exports:
- Verification verdict counters
- Per-check outcome counters
- Collaborator fetch counters
- Analysis duration
"""

from proofcheck.metrics.verification_metrics import (
    VerificationMetrics,
    get_verification_metrics,
)

__all__ = [
    "VerificationMetrics",
    "get_verification_metrics",
]
