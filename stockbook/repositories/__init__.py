"""
Persistence adapters and record repositories.

Adapters (memory, JSON file, SQL) store opaque strings by key. Repositories
encode/decode record collections on top of an injected adapter, so services
never touch the storage format directly.
"""
