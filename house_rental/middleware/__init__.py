"""
Middleware for the House Rental API.
"""

from .request import RequestContextMiddleware

__all__ = ["RequestContextMiddleware"]
