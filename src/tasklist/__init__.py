"""tasklist: a local SQLite to-do list with a console front end."""

__version__ = "0.1.0"
