"""
Task subsystem.

Components:
- task_models.py: data structures (Task, TaskStatus, SortKey, TaskPage)
- task_store.py: ownership-scoped row operations + reminder queries
- ordering.py: per-user manual order (append, page-window reorder)
- query.py: filter/search/sort/pagination query plans
- task_scheduler.py: polling sweep that pushes due-soon reminders
- task_api.py: TaskController, the lifecycle operations used by the web layer
"""
