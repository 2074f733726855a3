"""
notesync.

- backend/: Note store service (FastAPI), change feed, configuration, logging
- client/: Note client core (auth gate, editor sync, note list, layout) and gateways
"""
