# Routes package init
"""
CatAPI Backend — API Routes Package
=====================================

What:  HTTP route handlers, all mounted under /api/v1 except /health.

Route Inventory:
    - cats.py:     /api/v1/cats...           (cat CRUD, owner and area queries)
    - users.py:    /api/v1/users...          (registration, self-service, check-token)
    - auth.py:     POST /api/v1/auth/login
    - uploads.py:  GET  /api/v1/uploads/{filename}
    - health.py:   GET  /health

Routes stay thin: they pull data out of the request, resolve the principal
and collaborators through dependencies, call one service method and pick the
status code. Authorization and persistence live in the services.
"""
