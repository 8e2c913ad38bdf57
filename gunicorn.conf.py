# =============================================================================
# GUNICORN CONFIGURATION
# CIRA Backend - Production WSGI Server
# =============================================================================

import multiprocessing
import os

# =============================================================================
# SERVER SOCKET
# =============================================================================

bind = os.getenv("GUNICORN_BIND", "0.0.0.0:8000")

# =============================================================================
# WORKER PROCESSES
# =============================================================================

# Recommended: (2 x num_cores) + 1
workers = int(os.getenv("GUNICORN_WORKERS", multiprocessing.cpu_count() * 2 + 1))

# Live notification streams hold a thread each; sync workers would block
worker_class = os.getenv("GUNICORN_WORKER_CLASS", "gthread")
threads = int(os.getenv("GUNICORN_THREADS", 8))

# Restart workers periodically
max_requests = 1000
max_requests_jitter = 100

# Must exceed LIVE_STREAM_HEARTBEAT_SECONDS
timeout = int(os.getenv("GUNICORN_TIMEOUT", 120))

graceful_timeout = 30

keepalive = 5

# =============================================================================
# SECURITY
# =============================================================================

limit_request_line = 4094
limit_request_fields = 100
limit_request_field_size = 8190

# =============================================================================
# SERVER MECHANICS
# =============================================================================

# Daemonize - False for Docker (container manages process)
daemon = False
pidfile = None
user = None
group = None
chdir = os.getenv("GUNICORN_CHDIR", "/app")

# =============================================================================
# LOGGING
# =============================================================================

accesslog = "-"
errorlog = "-"
loglevel = os.getenv("GUNICORN_LOG_LEVEL", "info")
access_log_format = '%(h)s %(l)s %(u)s %(t)s "%(r)s" %(s)s %(b)s "%(f)s" "%(a)s" %(D)s'
capture_output = True
enable_stdio_inheritance = True

# =============================================================================
# PROCESS NAMING
# =============================================================================

proc_name = "cira"

# =============================================================================
# SERVER HOOKS
# =============================================================================

def worker_abort(worker):
    """Called when a worker receives SIGABRT (timeout)."""
    worker.log.warning(f"Worker {worker.pid} aborted; open live streams were dropped")


def post_fork(server, worker):
    """Called just after a worker has been forked."""
    server.log.info(f"Worker spawned (pid: {worker.pid}, threads: {threads})")
