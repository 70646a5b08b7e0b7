"""
Anchor Proof Verifier - Core Package

Configuration, logging and the error taxonomy shared by all components.
"""
