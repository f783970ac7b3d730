"""Services Layer — orchestrates the core against injected stores.

Invariants:
    - Services own transaction scope; core functions stay pure
"""
