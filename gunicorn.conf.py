import multiprocessing
import os

# Entry point: gunicorn -c gunicorn.conf.py "breakfast:create_app()"
# The in-memory rate limiter is per worker process; set
# RATE_LIMIT_BACKEND=redis to share counters across workers.
workers = int(os.environ.get('WEB_CONCURRENCY', (multiprocessing.cpu_count() * 2) + 1))
threads = int(os.environ.get('GUNICORN_THREADS', 2))
worker_class = "gthread"
preload_app = True
bind = os.environ.get('BIND', ':8000')
# Heroku/Render style proxy headers
forwarded_allow_ips = "*"
# Keep-alive tuning
timeout = 60
keepalive = 75
# Access logging
accesslog = "-"
errorlog = "-"
loglevel = os.environ.get('LOG_LEVEL', 'info')
