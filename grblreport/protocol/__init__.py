"""
Grbl text protocol: shared types and wire formatting helpers.
"""
