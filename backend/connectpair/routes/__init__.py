# Routes package init
"""
ConnectPair Backend: API Routes Package
========================================

Route Inventory:
    - health.py:         GET  /health
    - consultations.py:  POST /api/consultation
    - numbers.py:        GET  /api/numbers/search
    - newsletter.py:     POST /api/newsletter
    - admin.py:          GET  /api/admin/consultations  (UNAUTHENTICATED)

Routes stay thin: read the request, call a service, return its result.
Errors are raised as exceptions and formatted by the handlers in main.py.
"""
