"""Infrastructure layer for tierlists app.

This package contains integrations with external systems:
- Object storage backend for image blobs (S3/Garage/MinIO)
- Typed metadata queries over the relational store
- Blob key generation
- The store context bundling both stores

Keep infrastructure concerns separate from business logic.
"""
