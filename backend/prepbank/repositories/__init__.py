"""
Repositories package — data-access layer.

Each repository file handles all DB operations for one domain entity.
Repositories do NOT handle upload bookkeeping or business logic beyond
basic data integrity.

Convention:
    - One file per aggregate root (e.g., companies.py, whitelist.py)
    - All functions accept `AsyncSession` as the first argument
    - Use `flush()` internally; the session commit/rollback is handled
      by `session_scope()` in the caller
    - Functions return pydantic records from `prepbank.schemas`, never ORM rows
"""
