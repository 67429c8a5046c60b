"""
Store backends for the Tasks app.

- django_backend: PostgreSQL/SQLite through the Django ORM
- memory_backend: In-process dictionary for development/testing
"""
