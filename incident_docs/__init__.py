"""
Incident document intake service.

Fetches remotely hosted incident and signup documents, stores them in object
storage, and tracks their lifecycle and retries in PostgreSQL.
"""

__version__ = "0.1.0"
