"""
ConnectPair Backend: Application Package
=========================================

What: Form intake service for the ConnectPair marketing site.
How:  Consultation and newsletter submissions are validated, persisted to an
      embedded SQLite store, and followed by transactional emails.

Architecture Note:
    ┌─────────────────────────────────────┐
    │           Routes (API Layer)        │  ← HTTP concerns only
    ├─────────────────────────────────────┤
    │      Validation (field rules)       │  ← violations, never raises
    ├─────────────────────────────────────┤
    │   Services (request pipeline)       │  ← validate → persist → notify
    ├─────────────────────────────────────┤
    │       Models & Schemas (Data)       │  ← SQLAlchemy ORM + Pydantic
    ├─────────────────────────────────────┤
    │   Store (persistence) │ Notifier    │  ← built once, injected
    └─────────────────────────────────────┘
"""

__version__ = "1.0.0"
