"""
Auth package for the Splashlink API.

Provides the Credential Store (username -> password hash), password helpers
and the cookie-based FastAPI dependencies that identify the caller.
"""
