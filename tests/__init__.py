"""Test suite for content-graph.

This package contains tests for all modules:
- test_models: Pydantic content, edge and tag models
- test_catalog: Entity catalog and catalog snapshot
- test_compatibility: Relationship compatibility matrix
- test_relationships: Bidirectional edge store
- test_tags: Tag assignment store
- test_integrity: Protected-reference guard and cascading deletes
- test_suggestions: Potential-match suggestions
- test_store: In-memory and HTTP record stores
- test_validation: Integrity checks, reports and duplicate repair
- test_service: Command facade
- test_retry: Store retry decorator
- test_cli: Argument parsing and exit codes
"""
