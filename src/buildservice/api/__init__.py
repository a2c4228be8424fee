"""API module for the build service.

API layer:
- Validates inputs, reads/writes DB through the repository
- Hands new builds to the enrichment worker
- Forbidden: commit history lookups in the request path
"""
