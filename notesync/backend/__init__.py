"""
Note Store Service.

FastAPI application that stores notes per anonymous user and pushes
changes to connected clients.

- api/: HTTP endpoints (auth, notes, change stream, health)
- core/: Configuration, logging, errors, database, security
- events/: Note change events and the in-process change feed
- models/, repositories/, services/, schemas/: Note persistence layers
"""
