"""
Shadi Recommendations - Routers Package

FastAPI route handlers.

Routers:
- auth: Login, logout, verified identity and access checks
- reviews: Review edits and deletions (ownership enforced)
- admin: User administration and the audit log
"""

from app.routers import auth, reviews, admin

__all__ = ["auth", "reviews", "admin"]
