"""Route Modules — one file per concern.

Invariants:
    - Each module builds its own APIRouter
    - Routes never contain business logic (delegate to services/)
"""
