"""
Tests Package - Unit and integration tests for OpenStax Ingest.
===============================================================

Test modules:
- test_fetcher: HTTP retrieval, status handling, rate-limit delay
- test_extractor: Title, description and formula strategies
- test_pipeline: Chapter plan, orchestration, fault isolation, dedup
- test_shared: Config, hashing and text helpers
- test_storage: Importer upserts and formula search
- test_reporting: Dry-run and import summaries
- test_cli: Command-line behavior

Run tests with:
    pytest tests/
    pytest tests/ -v --cov=src/openstax_ingest
"""
