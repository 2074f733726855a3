"""
Note Change Events.

Every successful note mutation is published as a NoteChanged event to the
in-process ChangeFeed. The /notes/stream endpoint fans the feed out to
connected clients as Server-Sent Events, which is how live subscriptions
in the note client receive pushes.
"""
