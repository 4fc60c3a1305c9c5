# Routes package init
"""
EventSnap Backend — API Routes Package
========================================

Route Inventory:
    - process.py: POST /api/process   (recognise an image)
    - health.py:  GET  /health        (service health check)

Routes stay thin: read the request, call the service, return its result.
Error formatting lives in the exception handlers of main.py.
"""
