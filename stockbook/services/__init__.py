"""
High-level use cases for Stockbook.

Each service module orchestrates repositories to implement a flow of the app
(register, log in, restore a session, reset local data).

The presentation layer should call these services and the repositories
instead of reading or writing storage keys directly.
"""
