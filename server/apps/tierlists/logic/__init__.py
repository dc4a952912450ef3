"""Business logic layer for tierlists app.

This package contains all business logic for the tierlist catalog:
- Image upload (blob first, then entry row) and retrieval
- Tierlist creation and aggregate assembly
- Entry reassignment between tiers
- Reconciliation of orphaned blobs

Every operation receives a StoreContext explicitly, keep it
separate from models (data layer) and infrastructure (external systems).
"""
