"""
Insights Module
Pure calculators for flock health, finances and the debt/credit ledger.
"""
