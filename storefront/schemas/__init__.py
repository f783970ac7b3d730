"""Pydantic Schemas — request/response validation for API endpoints.

Invariants:
    - Schemas validate shape and types at the system boundary
    - Order positivity rules live in core/validate_order.py, not here

Design Decisions:
    - Separate from models: schemas are API contracts, models are persistence
"""
