# Services package init
"""
LessonShop Backend - Services Layer
=====================================

Service Inventory:
    - LessonService: list, search and partial update of lessons
    - OrderService:  order validation and intake

Services are constructed with the DocumentStore handle and return
Ok/Err results (lessonshop.results); they never build HTTP responses.
"""
