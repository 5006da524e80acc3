"""
Task subsystem.

Components:
- task_models.py: data structures (Task, TaskStatistics) and the JSON record shape
- task_errors.py: error taxonomy
- task_store.py: JSON snapshot file (load/save the whole collection)
- task_service.py: in-memory collection with add/update/remove/search
- task_stats.py: read-only statistics and grouping over a snapshot
- task_export.py: CSV / Markdown / JSON export and JSON import
"""
