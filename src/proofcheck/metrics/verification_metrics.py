"""
Anchor Proof Verifier - Verification Metrics

Metrics Categories:
- Analysis verdicts and duration
- Individual check outcomes
- Transaction lookups and fetch failures
"""

from prometheus_client import Counter, Histogram, Info

import structlog

logger = structlog.get_logger(__name__)


class VerificationMetrics:
    """
    Centralized metrics for proof verification.

    Provides visibility into:
    - How many proofs verify end to end
    - Which checks fail most often
    - How often the network collaborators are hit or fail
    """

    def __init__(self) -> None:
        """Initialize all verification metrics."""
        self._init_analysis_metrics()
        self._init_check_metrics()
        self._init_fetch_metrics()
        self._init_info_metrics()

    def _init_analysis_metrics(self) -> None:
        """Initialize analysis metrics."""
        self.analyses_total = Counter(
            "proofcheck_analyses_total",
            "Total proof analyses",
            ["result"],
        )

        self.analysis_duration = Histogram(
            "proofcheck_analysis_duration_seconds",
            "Time to analyze a proof",
            buckets=[0.05, 0.1, 0.25, 0.5, 1.0, 2.5, 5.0, 10.0, 30.0],
        )

    def _init_check_metrics(self) -> None:
        """Initialize per-check metrics."""
        self.checks_total = Counter(
            "proofcheck_checks_total",
            "Individual verification checks",
            ["check", "result"],
        )

    def _init_fetch_metrics(self) -> None:
        """Initialize collaborator fetch metrics."""
        self.transaction_fetches = Counter(
            "proofcheck_transaction_fetches_total",
            "Transaction lookups issued",
        )

        self.fetch_failures = Counter(
            "proofcheck_fetch_failures_total",
            "Collaborator fetch failures",
            ["source"],
        )

    def _init_info_metrics(self) -> None:
        """Initialize info metrics."""
        self.service_info = Info(
            "proofcheck_service",
            "Proof verifier service information",
        )

    # Convenience methods

    def record_analysis(self, valid: bool | None, duration: float) -> None:
        """Record a finished analysis; None means it ended in an error."""
        if valid is None:
            result = "error"
        else:
            result = "valid" if valid else "invalid"
        self.analyses_total.labels(result=result).inc()
        self.analysis_duration.observe(duration)

    def record_check(self, check: str, valid: bool) -> None:
        """Record an individual check outcome."""
        result = "valid" if valid else "invalid"
        self.checks_total.labels(check=check, result=result).inc()

    def record_transaction_fetch(self) -> None:
        """Record a transaction lookup."""
        self.transaction_fetches.inc()

    def record_fetch_failure(self, source: str) -> None:
        """Record a collaborator failure."""
        self.fetch_failures.labels(source=source).inc()

    def set_service_info(
        self,
        version: str,
        environment: str,
        blockchain_api: str,
    ) -> None:
        """Set service info labels."""
        self.service_info.info({
            "version": version,
            "environment": environment,
            "blockchain_api": blockchain_api,
        })


# Singleton instance
_verification_metrics: VerificationMetrics | None = None


def get_verification_metrics() -> VerificationMetrics:
    """Get global verification metrics instance."""
    global _verification_metrics
    if _verification_metrics is None:
        _verification_metrics = VerificationMetrics()
    return _verification_metrics
