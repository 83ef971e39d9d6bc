# Middleware package init
"""
FlagArchive Backend: Middleware Package
=======================================

Middleware Chain (order matters!):
    Request → [Request ID] → [Access log] → [GZip] → [CORS] → Route Handler

    1. Request ID first, so every later log line and error body can carry it
    2. The access log sees the final status code and total duration
    3. CORS is FastAPI's CORSMiddleware (handles preflight)

Both custom middlewares live in request_context.py.
"""
