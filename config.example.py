# config.example.py

"""
Documentation-only module (safe to commit).

The real configuration is loaded from environment variables (optionally via a local .env file).
This file exists to make the repo self-documenting even without opening .env.example.
"""

ENV_VARS = {
    # App / logging
    "TASKSHIFT_APP_NAME": "App display name (default: taskshift).",
    "TASKSHIFT_LOG_LEVEL": "Console logging level (default: INFO). The log file always gets DEBUG.",
    # Connectors
    "TASKSHIFT_CONSOLE_ENABLED": "Run the console REPL (true/false). When off, only the alarm loop runs.",
    # Local data (keep under a gitignored path)
    "TASKSHIFT_DATA_DIR": "Base directory for local data and logs (default: .local/taskshift).",
    "TASKSHIFT_STORE_DB_PATH": "SQLite file holding the task board (default: <DATA_DIR>/store.sqlite3).",
    "TASKSHIFT_ALARMS_DB_PATH": "SQLite file holding scheduled alarms (default: <DATA_DIR>/alarms.sqlite3).",
    # Schedule
    "TASKSHIFT_ROLLOVER_HOUR": "Local hour of the daily bucket shift (default: 21).",
    "TASKSHIFT_ROLLOVER_MINUTE": "Minute of the daily bucket shift (default: 0).",
    "TASKSHIFT_HOURLY_PERIOD_MINUTES": "Period of the untimed-task nudge (default: 60).",
    "TASKSHIFT_ALERT_LIST_LIMIT": "Max tasks listed in one nudge alert (default: 5).",
    # Alarm loop
    "TASKSHIFT_POLL_INTERVAL_SECONDS": "How often due alarms and external writes are checked (default: 15).",
    "TASKSHIFT_WATCHDOG_DELAY_SECONDS": "Delay before the one-off system alarm watchdog (default: 2).",
}
