"""
Supabase table names used by the dashboard.
"""

from enum import Enum


class StoreTable(str, Enum):
    """Tables in the Supabase project."""
    SHEEP = "sheep"
    SALES = "sales_records"
    EXPENSES = "expenses"
    DEBTS_CREDITS = "debts_credits"
    HEALTH_RECORDS = "health_records"
    USERS = "users"
