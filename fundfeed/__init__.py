"""Fundfeed Application Package — trending feed and engagement ledger for fundraising rounds.

Invariants:
    - Package root contains no executable code (import side-effects prohibited)

Design Decisions:
    - Empty __init__.py: explicit imports only, no star exports
"""
