"""
Knowledge base backend.

Stores embedded document chunks in Qdrant, degrading to an in-memory
store when Qdrant is unreachable.
"""
