"""API Dependencies — controller and analyzer handed to routes via FastAPI Depends.

Invariants:
    - Both objects are built once in the lifespan and stored on app.state
    - Routes never construct model clients themselves (tests override these providers)
"""

from fastapi import Request

from mindful_reframe.services.journal_analyzer import JournalAnalyzer
from mindful_reframe.services.reframe_controller import ReframeController


def get_reframe_controller(request: Request) -> ReframeController:
    return request.app.state.reframe_controller


def get_journal_analyzer(request: Request) -> JournalAnalyzer:
    return request.app.state.journal_analyzer
