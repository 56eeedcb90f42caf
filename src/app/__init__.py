"""Bookstore catalog API.

Book CRUD over a SQL store, with cover images kept on the local filesystem
and served under ``/images``.
"""

__version__ = "0.1.0"
