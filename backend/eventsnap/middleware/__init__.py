# Middleware package init
"""
EventSnap Backend — Middleware Package
========================================

What:  Cross-cutting concerns applied to every request.

Middleware Chain (outermost first):
    Request → [CORS] → [Request ID] → [Logging] → Route Handler

    - CORS outermost: headers land on every response, and OPTIONS preflight
      is answered before anything else runs
    - Request ID: correlation id for every log line of the request
    - Logging: one access line with status and duration
"""
