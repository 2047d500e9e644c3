"""Coddy public backend.

Public-facing authentication service: login, registration and token
verification for the Coddy learning platform.
"""

__version__ = "0.1.0"
