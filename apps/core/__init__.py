"""
Core app - Shared abstractions and utilities.

This app provides the pieces every other app leans on:
- The error taxonomy (exceptions)
- API-wide error rendering (handlers)

Nothing in here touches the database, so the client package can import
the exception classes without configuring Django.
"""
