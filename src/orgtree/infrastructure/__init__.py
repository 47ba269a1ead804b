"""Infrastructure layer: resource stores (SQLite, HTTP) and the database.

Stores validate records at the boundary and hand typed domain records to
the service layer. Failures surface as StoreError, never as empty results.
"""
