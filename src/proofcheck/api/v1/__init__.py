"""
Anchor Proof Verifier API v1

Endpoints:
- POST /verify - Analyze a proof document
"""

from fastapi import APIRouter

from proofcheck.api.v1.endpoints import verify

router = APIRouter()
router.include_router(verify.router, prefix="/verify", tags=["Verification"])
