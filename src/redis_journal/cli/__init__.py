"""redis-journal operator CLI.

Inspect and maintain journals in a live Redis. The CLI sits outside the
journal core and only uses EventJournal's public operations.
"""
