"""
Scheduled web-push notifier for a shared task/appointment board.

Components:
- reminders/engine.py: the time-window decision (should_fire)
- reminders/dispatcher.py: one scheduled run over all subscribers
- store/supabase_store.py: Supabase-backed NotificationStore
- push/webpush_transport.py: Web Push (VAPID) PushTransport
- cli/main.py: entrypoint invoked by the scheduler
"""
