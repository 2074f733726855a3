"""Note id allocation."""

import uuid


def new_note_id() -> str:
    """Time-based UUID, unique across clients without coordination."""
    return str(uuid.uuid1())
