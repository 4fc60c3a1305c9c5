"""
EventSnap Backend — Application Package Initializer
====================================================

What: Marks the `eventsnap` directory as a Python package.
Why:  Enables module imports like `from eventsnap.config import settings`.
Who:  Used implicitly by Python's import system and explicitly by pytest and uvicorn.

Architecture Note:
    The whole service is one request/response cycle, split into thin layers:

    ┌─────────────────────────────────────┐
    │       Middleware (CORS, logging)    │  ← headers on every response
    ├─────────────────────────────────────┤
    │           Routes (API Layer)        │  ← HTTP concerns only
    ├─────────────────────────────────────┤
    │   Services (extraction, DashScope)  │  ← upstream call + answer parsing
    ├─────────────────────────────────────┤
    │          Schemas (Pydantic)         │  ← request/response contracts
    └─────────────────────────────────────┘

    Nothing is persisted; no layer keeps state between requests.
"""

__version__ = "1.0.0"
