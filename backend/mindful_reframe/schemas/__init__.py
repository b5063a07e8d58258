"""Pydantic Schemas — request/response validation and model output validation.

Invariants:
    - Schemas validate at system boundaries (user input, API responses, model replies)
    - Enum fields travel as their string values

Design Decisions:
    - Separate from models: schemas are API contracts, models are persistence
"""
