"""
Domain Layer

Pure job rules: ledger, status pipeline, media visibility, customer matching.
Nothing in this package performs I/O.
"""
