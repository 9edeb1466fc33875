"""
FastAPI RESTful API for the Bookstore service.

This module provides a REST API for:
- Creating, reading, updating and deleting books
- Listing books by genre
- Database health reporting
"""
