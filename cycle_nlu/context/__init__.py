"""Per-user conversation and cycle state.

Provides:
- JsonContextStorage: durable one-file-per-user snapshots
- ContextStore: cached load-or-create plus the single merge operation
"""
