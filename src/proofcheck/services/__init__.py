"""
Anchor Proof Verifier - Services Package

Provides the network collaborators, data integrity and transaction checks,
and the analyzer that orchestrates them.

Use direct imports from submodules:
    from proofcheck.services.proof_analyzer import ProofAnalyzer
    from proofcheck.services.blockchain_client import BlockchainInfoClient
    etc.
"""
