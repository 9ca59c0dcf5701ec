"""Test package for grezzi.

This package contains:
- Unit tests (test_tolerance.py, test_clustering.py, test_ingest.py, test_sink.py)
- Orchestration and end-to-end tests (test_orchestrator.py, test_cli.py)
- HTTP service tests (test_api.py)
- Test configuration (conftest.py)
"""
