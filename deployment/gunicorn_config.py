"""
Gunicorn configuration for the Fuel Log service

    gunicorn -c deployment/gunicorn_config.py "app:create_app('production')"
"""
import multiprocessing
import os

APP_ROOT = os.environ.get('FUELLOG_ROOT', os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

# Server socket; nginx terminates TLS in front of this
bind = os.environ.get('FUELLOG_BIND', '127.0.0.1:8000')

# Statistics are computed per request and are CPU-bound, so plain sync workers
workers = int(os.environ.get('FUELLOG_WORKERS', multiprocessing.cpu_count() * 2 + 1))
worker_class = 'sync'
max_requests = 1000
max_requests_jitter = 50
timeout = 60
keepalive = 5

accesslog = os.path.join(APP_ROOT, 'logs', 'gunicorn_access.log')
errorlog = os.path.join(APP_ROOT, 'logs', 'gunicorn_error.log')
loglevel = os.environ.get('FUELLOG_LOG_LEVEL', 'info')
access_log_format = '%(h)s %(l)s %(u)s %(t)s "%(r)s" %(s)s %(b)s "%(f)s" "%(a)s" %(D)s'

proc_name = 'fuellog'
pidfile = os.path.join(APP_ROOT, 'gunicorn.pid')
umask = 0o007

# Import uploads are capped by MAX_CONTENT_LENGTH in config.py
limit_request_line = 4094
limit_request_fields = 100
limit_request_field_size = 8190


def on_starting(server):
    os.makedirs(os.path.join(APP_ROOT, 'logs'), exist_ok=True)


def post_fork(server, worker):
    server.log.info("Fuel Log worker spawned (pid: %s)", worker.pid)


def worker_abort(worker):
    worker.log.warning("Fuel Log worker timed out (pid: %s)", worker.pid)
