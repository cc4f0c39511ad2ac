"""
Storage Package

Handles persistence of the single cached snapshot.

Current implementation:
- kv_store.py: async key-value stores (in-memory, JSON file with atomic replace)
- snapshot_cache.py: SnapshotCache, the cached snapshot slot plus the rate gate

Only one slot ("cryptoData") is ever used; no history is kept.
"""
