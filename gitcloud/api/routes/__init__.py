"""
API route modules.

Each module exposes a `router` that main.create_app mounts under a prefix.
"""
