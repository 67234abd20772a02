"""
Core resolution engine.

`resolve_tracks` turns user-supplied identifiers into an ordered list of
track references, and `fetch_track_metadata` assembles the metadata used to
name and tag each of them.
"""
