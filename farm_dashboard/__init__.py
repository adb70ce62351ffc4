"""
Farm Dashboard
Backend for the farm management dashboard.
"""
