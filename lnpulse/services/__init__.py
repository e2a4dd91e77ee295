"""Services Layer — async orchestration around the pure core.

Invariants:
    - Services call the node client only through the NodeClient Protocol
    - Services never retry; retry policy belongs to the driver's caller
"""
