"""
FastAPI RESTful API for the Book Catalog service.

This module provides a REST API for:
- Creating, listing and soft-deleting books
- Appending comments to books
"""
