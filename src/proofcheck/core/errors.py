"""
Anchor Proof Verifier - Error Taxonomy

Pure checks only ever raise UnsupportedAlgorithmError. Network-backed checks
raise FetchFailedError; the one failure converted into a verdict is
TransactionNotFoundError, which means "not anchored" rather than "unknown".
"""


class ProofVerifierError(Exception):
    """Base exception for proof verification errors."""

    pass


class UnsupportedAlgorithmError(ProofVerifierError):
    """The proof names a digest family that cannot be computed."""

    def __init__(self, algorithm: str) -> None:
        super().__init__(f"Unsupported hash algorithm: {algorithm!r}")
        self.algorithm = algorithm


class MalformedProofError(ProofVerifierError):
    """The proof document is missing a required field or cannot be decoded."""

    pass


class FetchFailedError(ProofVerifierError):
    """
    A collaborator could not retrieve a remote resource.

    Attributes:
        status: HTTP status code, or None for timeouts and transport errors
        body: Response body (truncated) or error description
    """

    def __init__(
        self,
        message: str,
        status: int | None = None,
        body: str | None = None,
    ) -> None:
        super().__init__(message)
        self.status = status
        self.body = body


class NotFoundError(FetchFailedError):
    """The remote resource does not exist."""

    pass


class TransactionNotFoundError(NotFoundError):
    """The anchoring transaction does not exist on chain."""

    pass
