"""
Reports Package
Report aggregation, flat row assembly and CSV export.
"""
