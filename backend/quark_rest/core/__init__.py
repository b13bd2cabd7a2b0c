"""Core Layer — command model, resource contract, wire shapes, errors. No IO.

Invariants:
    - No module in core/ imports from services/, api/, infrastructure/, or db/
    - Everything here is pure data + pure functions

Design Decisions:
    - Functional core separated from imperative shell: the codec, dispatcher and
      proxy in services/ do the IO around these types
"""
