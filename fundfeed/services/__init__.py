"""Services Layer — ranking engine, engagement ledger, round lifecycle, reconciliation.

Invariants:
    - Services depend on core Protocols only, never on SQLAlchemy
    - No retries: store failures propagate to the caller as StoreUnavailableError

Design Decisions:
    - Repositories injected through constructors (impureim sandwich: core rules,
      async IO orchestrated here)
"""
