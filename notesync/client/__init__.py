"""
Note Client.

Frontend-independent core of the note client: anonymous auth gate, note
editor sync state machine, note list presenter, layout classification and
note creation, plus the gateways that reach a note store.

- gateway.py, snapshot.py: Note store interface and value types
- local.py: In-process note store (tests, offline demo)
- remote.py: Note store service over HTTP + Server-Sent Events
- auth.py, shell.py, navigation.py: Auth gate, workspace wiring, routing
- editor.py, note_list.py, creation.py, layout.py, ids.py: UI state
"""
