import os

# Application
wsgi_app = "wsgi:application"

# Server socket
bind = "0.0.0.0:8080"

# Worker processes
workers = int(os.environ.get("GUNICORN_WORKERS", "2"))
threads = int(os.environ.get("GUNICORN_THREADS", "4"))
worker_class = "gthread"
worker_tmp_dir = "/dev/shm"  # Use memory for worker heartbeats (faster)

# Timeouts
timeout = int(os.environ.get("GUNICORN_TIMEOUT", "30"))
graceful_timeout = 30
keepalive = 5

# Process naming
proc_name = "student-api"

# Server mechanics
daemon = False
pidfile = None
umask = 0
user = None
group = None
tmp_upload_dir = None
# Workers fork before the application is built; each worker builds its own
# on its first request
preload_app = False

# Logging
accesslog = "-"  # Log to stdout
errorlog = "-"   # Log to stderr
loglevel = os.environ.get("LOG_LEVEL", "info").lower()

# h: remote address, l: '-', u: user name, t: date/time, r: request line
# s: status code, b: response size, f: referer, a: user agent, D: time in microseconds
access_log_format = '%(h)s %(l)s %(u)s %(t)s "%(r)s" %(s)s %(b)s "%(f)s" "%(a)s" %(D)s'

HEALTH_CHECK_PATH = "/" + os.environ.get("API_PREFIX", "api").strip("/") + "/health"


def is_health_check(request):
    """Check if request is a health check."""
    return request.path == HEALTH_CHECK_PATH


def on_starting(server):
    server.log.info("Starting Gunicorn server")


def when_ready(server):
    server.log.info(f"Gunicorn server ready - Workers: {workers}, Threads: {threads}")


def post_fork(server, worker):
    server.log.info(f"Worker {worker.pid} spawned")


def pre_request(worker, req):
    # Don't log health checks
    if is_health_check(req):
        return
    worker.log.debug(f"{req.method} {req.path}")


def worker_abort(worker):
    """Called when a worker times out."""
    worker.log.error(f"Worker {worker.pid} timed out")


def on_exit(server):
    server.log.info("Shutting down Gunicorn server")
