"""
Boundary layer.

Adapters for external systems; currently the vector store (Qdrant) and its
in-memory fallback under `boundary.vdb`.
"""
