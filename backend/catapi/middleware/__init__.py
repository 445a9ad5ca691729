# Middleware package init
"""
CatAPI Backend — Middleware Package
=====================================

What:  Cross-cutting request handling shared by every route.

Middleware Chain:
    Request → [Request ID] → [Logging] → [GZip] → [CORS] → Route Handler

    The request id is set first so the access log line and any error body
    produced further in carry it.
"""
