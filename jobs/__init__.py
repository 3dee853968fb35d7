"""
Job runtime.

Dramatiq actors, the cron scheduler that enqueues them and the
scheduler health server.
"""
