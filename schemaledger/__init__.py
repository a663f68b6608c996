"""
schemaledger - SQL migration runner with a transactional applied-state ledger.
"""

__version__ = '1.0.0'
