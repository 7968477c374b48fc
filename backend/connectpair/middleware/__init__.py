# Middleware package init
"""
ConnectPair Backend: Middleware Package
========================================

Middleware Chain (order matters!):
    Request → [Rate Limit] → [Request ID] → [Logging] → [Security Headers]
            → [CORS] → Route Handler

    1. Rate Limit first: reject floods before any other work
    2. Request ID: correlation ID for every later log line
    3. Logging: method, path, status, duration
    4. Security headers: helmet-style hardening on every response
    5. CORS: FastAPI's CORSMiddleware, frontend origin only
"""
