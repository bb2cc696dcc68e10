# Middleware package init
"""
LessonShop Backend - Middleware Package
=========================================

Interceptor pipeline (order is part of the contract):
    Request → [Request ID] → [Logging] → [CORS] → [Image Existence] → Router

    - Logging sees every request, so a missing image still produces an
      access-log line even though the image check answers it.
    - The image check short-circuits with a JSON 404; everything else
      continues to the router and static mounts.
"""
