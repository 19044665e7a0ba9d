"""
Service modules for the placement tag engine.

This package contains the generation orchestrator, the bulk trafficking
export and the dimension-mismatch repair.
"""
