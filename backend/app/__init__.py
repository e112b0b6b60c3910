"""
Chirp Backend — Application Package
====================================

A GraphQL API for users, profiles and tweets.

    ┌─────────────────────────────────────┐
    │   GraphQL (Strawberry) + /health    │  ← schema, permissions, resolvers
    ├─────────────────────────────────────┤
    │         Services (Business Logic)   │  ← auth, tokens, CRUD
    ├─────────────────────────────────────┤
    │            Models (ORM)             │  ← SQLAlchemy mapped classes
    ├─────────────────────────────────────┤
    │        Database (Persistence)       │  ← async SQLAlchemy sessions
    └─────────────────────────────────────┘
"""

__version__ = "1.0.0"
