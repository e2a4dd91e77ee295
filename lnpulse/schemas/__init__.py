"""Pydantic Schemas — validation of externally sourced node data.

Invariants:
    - Schemas validate at system boundary (LND REST payloads, routing-event payloads)
    - Every schema converts into a core dataclass; core never sees pydantic models

Design Decisions:
    - Separate from core models: schemas are wire contracts, core models are view state
"""
