"""Infrastructure Layer — database session management, SQL adapters, logging.

Invariants:
    - Infrastructure implements the core's boundary protocols; core never imports it
    - Driver exceptions are mapped to StoreUnavailableError before leaving this layer
"""
