"""SQLAlchemy-backed reference implementation of the SQL store collaborators."""
