"""
Integration Tests

Integration tests require a running PostgreSQL reachable with the
POSTGRES_TEST_* (or POSTGRES_*) environment variables.

These tests verify the storage-level constraints and the API end to end.
"""
