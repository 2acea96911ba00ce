"""Infrastructure Layer — store clients and cross-cutting concerns.

Invariants:
    - Infrastructure implements core Protocols; core never imports from here
    - All SQLAlchemy failures mapped to core errors at this boundary

Design Decisions:
    - One repository module per entity, each owning its ORM <-> record mapping
"""
