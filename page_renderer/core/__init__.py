"""
Core Business Logic
==================

Rendering orchestration over the embedded browser engine.
"""
