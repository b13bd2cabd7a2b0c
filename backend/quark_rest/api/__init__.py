"""API Layer — FastAPI transport for the task route, health probes and error handlers.

Invariants:
    - Routes registered explicitly in main.py (no auto-discovery)
    - All endpoints return structured JSON responses

Design Decisions:
    - Thin routes: decode, dispatch, encode; the logic lives in services/
"""
