"""
PromptShelf Backend: Application Package
=========================================

What: Stores creative prompts (title, text, tags) alongside an image that is
      committed to a GitHub repository and served from its raw download URL.
Who:  Imported by uvicorn (``promptshelf.main:app``), Alembic and pytest.

Architecture Note:
    ┌─────────────────────────────────────┐
    │           Routes (API Layer)        │  ← HTTP concerns, auth dependency
    ├─────────────────────────────────────┤
    │         Services (Business Logic)   │  ← create/list orchestration, GitHub upload
    ├─────────────────────────────────────┤
    │   Repositories, Models & Schemas    │  ← PromptStore, SQLAlchemy ORM, Pydantic
    ├─────────────────────────────────────┤
    │        Database (Persistence)       │  ← Async engine owned by the lifespan
    └─────────────────────────────────────┘
"""

__version__ = "1.0.0"
