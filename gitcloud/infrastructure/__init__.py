"""
Infrastructure layer - external service integrations.

Each subdirectory wraps an external dependency:
- github: GitHub REST API (repositories and file contents)

These wrappers translate between external formats and our domain models.
"""
