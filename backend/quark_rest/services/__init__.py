"""Services Layer — wire codec, service dispatcher, client proxy, resource serializer.

Invariants:
    - Collaborators (store, transport, registry) are reached through core protocols only
    - Codec and dispatcher route the same closed set of command kinds
"""
