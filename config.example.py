# config.example.py

"""
Documentation-only module (safe to commit).

The real configuration is loaded from environment variables (optionally via a local .env file).
This file exists to make the repo self-documenting even without opening .env.example.
"""

ENV_VARS = {
    # App / logging
    "TASKLIST_APP_NAME": "App display name (default: tasklist).",
    "TASKLIST_LOG_LEVEL": "Console logging level (default: WARNING). The log file always gets DEBUG.",
    # Paths
    "TASKLIST_DATA_DIR": "Local data directory (default: .local/tasklist).",
    "TASKLIST_TASKS_DB_PATH": "SQLite database file (default: <data_dir>/tasks.sqlite3).",
    # Store / view
    "TASKLIST_SEED_ON_CREATE": "Insert three example tasks when the database is first created (default: true).",
    "TASKLIST_STOP_TIMEOUT_SECONDS": "Keep the live task query running this long after the last observer leaves (default: 5).",
}
