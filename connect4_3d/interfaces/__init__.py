"""
connect4_3d.interfaces - User interfaces for 3D Connect Four

This package contains the terminal front end.
"""

# Don't import anything here to avoid circular imports
__all__ = []
