"""
CatAPI Backend — Security Package
===================================

What:  Identity primitives shared by routes and services.

Modules:
    - principal.py:  Principal, the authenticated identity passed to services
    - passwords.py:  bcrypt hashing and verification
    - tokens.py:     JWT access token issue / decode
    - deps.py:       FastAPI dependencies resolving the Principal of a request
"""
