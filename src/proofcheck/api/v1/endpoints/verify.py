"""
Anchor Proof Verifier API - Verification Endpoints

- POST /verify: Analyze a proof document and return the verification report
"""

from typing import Any

import structlog
from fastapi import APIRouter, HTTPException, Request, status
from pydantic import BaseModel, Field

from proofcheck.core.errors import (
    FetchFailedError,
    MalformedProofError,
    UnsupportedAlgorithmError,
)
from proofcheck.models.proof import Proof
from proofcheck.services.proof_analyzer import ProofAnalyzer

logger = structlog.get_logger(__name__)
router = APIRouter()


# Request/Response Models
class VerifyRequest(BaseModel):
    """Request to verify a proof."""

    proof: dict[str, Any] = Field(
        ...,
        description="Proof document with header, target and extras sections",
    )
    data_url: str | None = Field(
        default=None,
        description="Override for the location of the original data",
    )


class ValidationsResponse(BaseModel):
    """Individual check verdicts."""

    target_hash_valid: bool
    merkle_root_valid: bool
    data_hash_valid: bool
    transaction_valid: bool


class VerifyResponse(BaseModel):
    """Verification report."""

    validations: ValidationsResponse
    confirmations: int
    overall_valid: bool
    data_location: str
    transaction_id: str
    merkle_root: str


def _apply_data_url(document: dict[str, Any], data_url: str) -> dict[str, Any]:
    """Return a copy of the document whose extras point at data_url."""
    if isinstance(document.get("proof"), dict):
        document = document["proof"]
    document = dict(document)
    extras = dict(document.get("extras") or {})
    extras["dataUrl"] = data_url
    document["extras"] = extras
    return document


@router.post(
    "",
    response_model=VerifyResponse,
    summary="Verify proof",
    description="Re-derive every claim of an anchored proof of existence.",
    responses={
        200: {"description": "Verification report"},
        422: {"description": "Malformed proof or unsupported hash algorithm"},
        502: {"description": "Data or transaction could not be fetched"},
    },
)
async def verify_proof(
    request: VerifyRequest,
    req: Request,
) -> VerifyResponse:
    """
    Verify a proof.

    Steps:
    1. Parse the proof document
    2. Run target hash, Merkle root, data hash and transaction checks
    3. Count confirmations of the anchoring transaction
    """
    document = request.proof
    if request.data_url:
        document = _apply_data_url(document, request.data_url)

    try:
        proof = Proof.from_document(document)
    except (MalformedProofError, UnsupportedAlgorithmError) as e:
        logger.info("Rejected proof document", error=str(e))
        raise HTTPException(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            detail=str(e),
        )

    logger.info(
        "Verification requested",
        tx_id=proof.transaction_id,
        merkle_root=proof.merkle_root[:16] + "...",
    )

    try:
        analyzer = ProofAnalyzer(
            proof,
            data_fetcher=getattr(req.app.state, "data_fetcher", None),
            transaction_fetcher=getattr(req.app.state, "transaction_fetcher", None),
        )
    except MalformedProofError as e:
        raise HTTPException(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            detail=str(e),
        )

    try:
        async with analyzer:
            report = await analyzer.analyze()
    except FetchFailedError as e:
        logger.warning(
            "Verification incomplete",
            tx_id=proof.transaction_id,
            status_code=e.status,
            error=str(e),
        )
        raise HTTPException(
            status_code=status.HTTP_502_BAD_GATEWAY,
            detail=f"Verification incomplete: {e}",
        )

    return VerifyResponse(
        validations=ValidationsResponse(**report.to_dict()["validations"]),
        confirmations=report.confirmations,
        overall_valid=report.overall_valid,
        data_location=analyzer.data_location,
        transaction_id=proof.transaction_id,
        merkle_root=proof.merkle_root,
    )
