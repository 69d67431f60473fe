"""
Task Management System API package.

The FastAPI application lives in `tms_api.main` (`app`, or `create_app()` to
build one with explicit settings). Run it with `python -m tms_api`.
"""

__version__ = "1.0.0"
