"""System domain package.

This package contains system-level components:
- PathResolver: Per-platform location of the user data directory
"""
