"""
Tests package - test suite for the Keycloak SMTP sync.

Contains:
- unit/: Unit tests for individual components
- fixtures/: Sample realms and Secrets
"""
