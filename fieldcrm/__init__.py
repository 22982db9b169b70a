"""
fieldcrm

Job domain-logic layer for a field-service CRM: financial ledger, status
pipeline, media visibility rules and the job aggregate that persists them.
"""

__version__ = "1.0.0"
