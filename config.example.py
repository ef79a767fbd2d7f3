# config.example.py

"""
Documentation-only module (safe to commit).

The real configuration is loaded from environment variables (optionally via a local .env file).
This file exists to make the repo self-documenting even without opening .env.example.
"""

ENV_VARS = {
    # App / logging
    "TODO_APP_NAME": "App display name (default: todo).",
    "TODO_LOG_LEVEL": "Console logging level (default: INFO).",
    # Front-end
    "TODO_CONSOLE_ENABLED": "Run the interactive console (true/false, default: true).",
    # Paths (gitignored)
    "TODO_DATA_DIR": "Local data directory (default: .local/todo).",
    "TODO_STORE_PATH": "Key-value SQLite path (default: <data_dir>/storage.sqlite3).",
    # Storage keys
    "TODO_TODOS_KEY": "Key holding the task list (default: todos).",
    "TODO_REVIEW_TASKS_KEY": "Key holding the review-task array (default: review_tasks).",
    "TODO_THEME_KEY": "Key holding the theme preference (default: todoTheme).",
    # Bridge
    "TODO_SYNC_REVIEW_TASKS": "Import/export review tasks (true/false, default: true).",
}
