"""
Terminal Front End.

Textual application that captures input for the session loop and renders
each session snapshot. Layout lives here; behaviour lives in adnotes.session.
"""
