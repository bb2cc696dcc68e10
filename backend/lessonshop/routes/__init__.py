# Routes package init
"""
LessonShop Backend - API Routes
=================================

Route Inventory:
    - lessons.py: GET /lessons, GET /search, PUT /lessons/{lesson_id}
    - orders.py:  POST /orders
    - health.py:  GET /health, GET / (when no frontend bundle is served)

Each module exposes build_router(<service>), so handlers receive their
service (and through it the store handle) when the app is assembled.
"""
