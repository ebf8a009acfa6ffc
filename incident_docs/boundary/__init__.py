"""
Boundary layer: adapters for PostgreSQL, object storage and remote HTTP sources.
"""
