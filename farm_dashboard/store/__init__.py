"""
Store Package
Read/write boundary over the Supabase tables.
"""
