"""
Shadi Recommendations - Background Tasks Package

Celery background tasks.
"""
