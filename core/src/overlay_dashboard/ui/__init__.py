"""Server-rendered dashboard UI.

Served by the FastAPI app itself with Jinja2 templates and plain HTML forms;
a small static script only disables the submit button while a request is
outstanding.

Each browser gets a form session via the `od_session` cookie.
"""
