"""
Application package containing configuration, persistence, the typing
evaluation engine, and service layers for the typescore FastAPI project.
"""

__all__ = [
    "config",
    "time_utils",
    "db",
    "repositories",
    "services",
    "schemas",
]
