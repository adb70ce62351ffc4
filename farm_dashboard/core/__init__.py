"""
Core Package
Cross-cutting error handling.
"""
