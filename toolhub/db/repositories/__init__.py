"""
Per-domain repository modules for database access.

Each function takes the SQLAlchemy session as its first argument; services
receive the session explicitly and never build their own.
"""
