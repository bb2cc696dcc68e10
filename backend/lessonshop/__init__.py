"""
LessonShop Backend - Application Package
==========================================

HTTP backend for a lesson-booking storefront: list and search lessons,
accept orders, update lessons, serve images and the frontend bundle.

Layers:

    ┌─────────────────────────────────────┐
    │  Routes + Middleware (HTTP)         │  ← status codes, interceptors
    ├─────────────────────────────────────┤
    │  Services (Ok/Err results)          │  ← validation, one store op each
    ├─────────────────────────────────────┤
    │  Models & Schemas (Data)            │  ← SQLAlchemy ORM + Pydantic
    ├─────────────────────────────────────┤
    │  DocumentStore (Persistence)        │  ← async SQLAlchemy engine/sessions
    └─────────────────────────────────────┘
"""

__version__ = "1.0.0"
