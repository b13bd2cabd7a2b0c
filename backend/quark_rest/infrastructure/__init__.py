"""Infrastructure — concrete transport, registry, store and logging adapters.

Invariants:
    - Each module implements one protocol from core/repository_protocols.py
      (or is plumbing for one)
"""
