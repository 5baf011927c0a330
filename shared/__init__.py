"""
Shared Kernel

Value objects and infrastructure helpers (cache, pagination) used by every
domain app.
"""
