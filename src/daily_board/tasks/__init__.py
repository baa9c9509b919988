"""
Task subsystem.

Components:
- task_models.py: data structures (Task, TaskPatch, StreakCounter, enums)
- task_store.py: SQLite-backed task storage + bulk bucket updates
- streak.py: consecutive-day streak tracker
- rollover.py: once-a-day bucket advancement
- rollover_scheduler.py: polling loop / manual trigger for the rollover
- task_api.py: high-level helpers used by the UI layer
"""
