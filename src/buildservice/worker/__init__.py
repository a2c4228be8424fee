"""Background workers.

The enrichment worker augments created builds with dependency merge base
dates. It owns its own database sessions and never reports back to the
request that created the build.
"""
