"""
Gunicorn configuration for production deployment of the product API.
"""
import multiprocessing
from pathlib import Path

# Load LOG_DIR from .env (via framework.config)
from framework.config import settings

LOG_DIR = Path(settings.LOG_DIR)
LOG_DIR.mkdir(parents=True, exist_ok=True)

# Server
bind = "0.0.0.0:8000"
backlog = 2048

# Worker processes
workers = min(multiprocessing.cpu_count() * 2 + 1, 8)
worker_class = "uvicorn.workers.UvicornWorker"  # Uvicorn worker for async support
max_requests = 1000  # Restart worker after this many requests to avoid memory leaks
max_requests_jitter = 50
timeout = 60  # Matches the longest database command we allow
keepalive = 5

# Process name (from config; fallback to APP_NAME)
proc_name = (settings.GUNICORN_PROC_NAME or settings.APP_NAME.lower().replace(" ", "-"))[:32]

# Logging (paths built from LOG_DIR in .env)
accesslog = str(LOG_DIR / "gunicorn_access.log")
errorlog = str(LOG_DIR / "gunicorn_error.log")
loglevel = "info"
access_log_format = '%(h)s %(l)s %(u)s %(t)s "%(r)s" %(s)s %(b)s "%(f)s" "%(a)s" %(D)s'

# Process management
daemon = False  # Managed by systemd, do not daemonize
pidfile = str(LOG_DIR / "gunicorn.pid")
preload_app = True
graceful_timeout = 30

# Security
limit_request_line = 4094
limit_request_fields = 100
limit_request_field_size = 8190

def when_ready(server):
    server.log.info("%s is ready. Listening on %s", settings.APP_NAME, server.address)

def post_fork(server, worker):
    """Each worker builds its own engine; connection pools must not cross a fork."""
    from framework.database.manager import DatabaseManager
    DatabaseManager._instance = None
    server.log.info("Worker spawned (pid: %s)", worker.pid)

def on_exit(server):
    server.log.info("%s is shutting down.", settings.APP_NAME)
