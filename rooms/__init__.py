"""
Rooms app: rendezvous and relay for one-time-code file sharing.

This app contains:
- A Channels consumer for `/ws/share/`
- An in-memory session registry (code -> uploader, creation time, members)
- A relay router and lifecycle state machine for meta/chunk/end events
- A periodic reaper that expires abandoned rooms
"""
