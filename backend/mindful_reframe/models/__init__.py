"""ORM Models — SQLAlchemy declarative models for all persisted entities.

Invariants:
    - All models inherit from Base (db/base.py)
    - Every user-owned row carries user_id; ownership checks happen in the store

Design Decisions:
    - One file per entity for locality
    - All models imported here so SQLAlchemy resolves string-based relationship()
      references before any query runs
"""

from mindful_reframe.models.journal_entry import JournalEntryRecord  # noqa: F401
from mindful_reframe.models.intake_response import IntakeResponseRecord  # noqa: F401
from mindful_reframe.models.reframing_session import ReframingSessionRecord  # noqa: F401
from mindful_reframe.models.reframe_summary import ReframeSummaryRecord  # noqa: F401
