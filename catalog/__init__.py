"""
Catalog package for the book catalog service.

This package contains:
- Book record model and lifecycle states
- Catalog error taxonomy
- MongoDB connection management
"""

__version__ = "1.0.0"
