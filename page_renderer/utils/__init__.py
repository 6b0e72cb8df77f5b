"""
Shared Utilities
===============

Common helper functions used across the application.

Modules:
- filenames: PDF filename derivation and Content-Disposition headers
"""
