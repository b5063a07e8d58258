"""Services Layer — the imperative shell around the pure reframing core.

Invariants:
    - Services await IO (model, database) and delegate every decision to core/
    - The controller never persists; chat_turns owns load → run → save → commit

Design Decisions:
    - Prompt building lives here, not in core: it is pure, but it is the only
      consumer of method guidance text and model reply contracts
"""
