"""
Task subsystem.

Components:
- task_models.py: data structures (Task, TaskPriority)
- task_store.py: SQLite-backed storage, raises StorageError
- live_query.py: change bus + live queries re-emitted after each commit
- task_repository.py: wraps write failures into RepositoryError
"""
