"""
Records Package
Create, edit and delete sheep, health records, transactions and ledger entries.
"""
