# Routes package init
"""
Dionysus Backend — API Routes Package
=======================================

Route Inventory:
    - auth.py:    POST /api/auth/sync   (user sync + authentication alert)
    - health.py:  GET  /health          (service health check)

Routes stay thin: extract request data, call a service, shape the response.
"""
