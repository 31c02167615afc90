"""
Interactive Session.

The state machine that drives one note-taking session, independent of any
rendering or terminal concerns.

- modes: the eleven session modes and the search payload
- events: input events fed to the machine
- keys: key identity to action resolution
- timers: scheduler abstraction (asyncio in production, fake in tests)
- debounce: single-timer debounce for search input
- context: mutable view-state and its read-only snapshot
- machine: event handling and transitions
- loop: single-consumer event loop around the machine
"""
