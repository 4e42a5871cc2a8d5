"""
Backend package for the portfolio dashboard.

This package provides a FastAPI application exposing CRUD endpoints for the
portfolio collections, backed by either an in-memory store or a relational
database behind a common storage interface.
"""
