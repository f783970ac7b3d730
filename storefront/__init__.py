"""Storefront — inventory and ordering backend.

Invariants:
    - Package root contains no executable code (import side-effects prohibited)
"""
