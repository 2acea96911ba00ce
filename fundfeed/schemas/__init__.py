"""Pydantic Schemas — request/response validation for API endpoints.

Invariants:
    - Schemas validate at system boundary (user input, API responses)
    - Responses use camelCase keys (the PWA client's field names)

Design Decisions:
    - Separate from models and records: schemas are API contracts, models are
      persistence, records are the domain
"""
