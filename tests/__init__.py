"""
Test Suite
==========

Test suite matching the page_renderer/ package structure.

Test Categories:
- unit: Unit tests for individual components
- integration: HTTP layer tests against a fake browser
- e2e: Live rendering against a real Chromium (opt-in)
"""
