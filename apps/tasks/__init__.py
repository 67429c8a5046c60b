"""
Tasks app - Persistence and service layer for task records.

This app provides:
- The Task DTO with its sanitize/validate rules
- A storage abstraction (TaskStoreInterface) with Django ORM and memory backends
- A middleware-composable service (TaskServiceInterface)
- The schema lifecycle (up/down/drop) on top of Django migrations
"""
