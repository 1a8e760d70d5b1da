"""Test fixtures for Kitchen CPQ.

This package provides reusable test fixtures:
- catalog: Catalog factories and the built-in sample catalog
- sessions: QuoteSession instances advanced to each workflow phase
- api: TestClient wiring for the FastAPI app
"""
