"""ORM Models — SQLAlchemy declarative models for all domain entities.

Invariants:
    - All models inherit from Base (db/base.py)
    - ORM rows never leave infrastructure/: repositories map them to core records

Design Decisions:
    - One file per entity for locality
    - All models imported here so SQLAlchemy resolves string-based relationship()
      references before any query runs
"""

from fundfeed.models.user import User  # noqa: F401
from fundfeed.models.fundraising_round import FundraisingRound  # noqa: F401
from fundfeed.models.intro_request import IntroRequest  # noqa: F401
