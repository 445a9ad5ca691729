"""
CatAPI Backend — Application Package
======================================

A CRUD service for cats and their owners.

Layers:
    routes        HTTP concerns: parameters, status codes, dependencies
    services      authorization decisions and operation logic
    repositories  every SQL statement, including the cat/owner join
    models        SQLAlchemy tables; schemas: pydantic API contracts
    security      principal, bcrypt passwords, JWT tokens
"""

__version__ = "1.0.0"
