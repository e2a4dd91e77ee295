"""Core Layer — pure domain logic, no IO, no async.

Invariants:
    - No module in core/ imports from services/, schemas/ or infrastructure/
    - Every mutation of a sub-model is a single assignment visible atomically to readers

Design Decisions:
    - Functional core separated from imperative shell: reconciliation that needs
      the node client lives in services/, the data structures it mutates live here
"""
