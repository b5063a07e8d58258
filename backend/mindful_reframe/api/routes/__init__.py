"""Route Modules — one file per resource.

Invariants:
    - Each module defines its own APIRouter with prefix and tags
    - Routes never decide dialogue transitions (delegate to services/chat_turns)

Design Decisions:
    - Explicit registration in main.py over auto-discovery
"""
