# config.example.py

"""
Documentation-only module (safe to commit).

The real configuration is loaded from environment variables (optionally via a local .env file).
Do NOT commit real secrets. Use:
- .env (local, gitignored)
- the scheduler's secret store (Netlify/Vercel env, Kubernetes secrets, ...)

This file exists to make the repo self-documenting even without opening .env.example.
"""

ENV_VARS = {
    # App / logging
    "NOTIFIER_APP_NAME": "App display name (default: task-notifier).",
    "NOTIFIER_LOG_LEVEL": "Console logging level (default: INFO).",
    "NOTIFIER_LOG_DIR": "Optional directory for a full DEBUG log file (default: console only).",
    # Supabase
    "NOTIFIER_SUPABASE_URL": "Supabase project URL (legacy name SUPABASE_URL also accepted).",
    "NOTIFIER_SUPABASE_SERVICE_KEY": "Service-role key (legacy name SUPABASE_SERVICE_KEY also accepted).",
    # Web Push
    "NOTIFIER_VAPID_PRIVATE_KEY": "VAPID private key (legacy name VAPID_PRIVATE_KEY also accepted).",
    "NOTIFIER_VAPID_SUBJECT": "VAPID contact claim (default: mailto:admin@example.com).",
    "NOTIFIER_PUSH_TTL_SECONDS": "How long push services keep an undelivered message (default: 86400).",
    # Schedule
    "NOTIFIER_RUN_INTERVAL_MINUTES": (
        "Reminder window; MUST equal the scheduler cadence (default: 5)."
    ),
    "NOTIFIER_TZ_OFFSET_HOURS": "Fixed UTC offset of the board's local time (default: 3, Riyadh).",
    "NOTIFIER_EVENTS_SUMMARY_HOUR": "Local hour of the daily appointments summary (default: 7).",
    "NOTIFIER_IN_PROGRESS_SUMMARY_HOUR": "Local hour of the in-progress tasks summary (default: 8).",
    "NOTIFIER_OVERDUE_SUMMARY_HOUR": "Local hour of the overdue tasks summary (default: 9).",
    "NOTIFIER_SUMMARY_GATE_MINUTES": (
        "Summaries fire during the first N minutes of their hour; 1..run interval (default: run interval)."
    ),
    "NOTIFIER_MAX_CONCURRENCY": "Subscribers processed in parallel (default: 4).",
    "NOTIFIER_LOOP": "Keep running on interval-aligned ticks instead of exiting after one run (true/false).",
}
