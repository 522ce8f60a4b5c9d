"""Domain layer for equitrack: entities, errors and the equity engine.

Services live in their own modules (balances, ledger, batch, distribution,
transfer, reports, account, project, category, transaction) and are imported
from there, which keeps the database and utils layers free to import
entities and errors without pulling in every service.
"""
