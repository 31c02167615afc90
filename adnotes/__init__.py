"""
adnotes Application Package.

- backend/: Note store, configuration, logging, companion process control
- session/: Session state machine, debounce controller, session loop
- tui/: Terminal front end (Textual)
"""
