"""
Core utilities shared across the Stockbook package.

This package hosts:
- configuration helpers (env vars, storage paths, key namespace)
- the error taxonomy raised by repositories and services
- logging setup, credential hashing and id/time helpers

Repositories and services depend on these primitives instead of reading
os.environ or hashing passwords themselves.
"""
