"""
Top-level package for the admin data-grid toolkit.

Most code should import from submodules such as:
    yushan_admin.core
    yushan_admin.services
    yushan_admin.ui
"""

__all__: list[str] = []
