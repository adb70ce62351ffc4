"""
Admin Package
User management for administrators.
"""
