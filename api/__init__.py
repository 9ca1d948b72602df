"""
FastAPI RESTful API for the Books catalog.

This module provides a small REST API for:
- Listing all books and the available ones
- Creating, updating and deleting books
- A welcome page and a health check
"""
