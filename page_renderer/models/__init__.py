"""
Data Models
===========

Pydantic models for render options, API responses and health status.
"""
