"""
gitcloud - Photo uploads stored in rotating GitHub repositories.

This package contains the complete application:
- core: Framework-agnostic upload logic
- infrastructure: External service integrations
- api: FastAPI routes and dependencies
- config: Application configuration
"""

__version__ = "0.1.0"
