"""
Task subsystem.

Components:
- task_models.py: data structures (Task, Bucket, TaskBoard)
- time_utils.py: "HH:MM" parsing and fire-time arithmetic
- task_store.py: board persistence facade (read / write / subscribe)
- alarm_names.py, alarm_registry.py: durable named alarms
- task_scheduler.py: reconciliation of task alarms + system alarms + watchdog
- rollover.py: daily bucket shift
- notifier.py: turns fired alarms into alerts
- alarm_loop.py: polling loop that fires due alarms
- task_api.py: mutations used by the UI
- lifecycle.py: install / startup hooks
"""
