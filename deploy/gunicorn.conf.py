"""
Gunicorn settings for Community.

Client runtimes and the snapshot bus live in worker memory, so every browser
has to reach the same process: run one worker and scale with threads.
"""

from __future__ import annotations

import logging
import os


def _env_int(name: str, default: int) -> int:
    return int(os.environ.get(name, str(default)))


bind = os.environ.get("GUNICORN_BIND", "0.0.0.0:8000")
worker_class = "gthread"
workers = _env_int("GUNICORN_WORKERS", 1)
threads = _env_int("GUNICORN_THREADS", 8)

# Must outlast AI_ASSIST_TIMEOUT_SECONDS so a slow generation is not killed mid-request.
timeout = _env_int("GUNICORN_TIMEOUT", 60)
graceful_timeout = _env_int("GUNICORN_GRACEFUL_TIMEOUT", 30)
keepalive = _env_int("GUNICORN_KEEPALIVE", 5)

accesslog = os.environ.get("GUNICORN_ACCESSLOG", "-")
errorlog = os.environ.get("GUNICORN_ERRORLOG", "-")
loglevel = os.environ.get("GUNICORN_LOGLEVEL", "info")
capture_output = True

# Recycling a worker would drop every client runtime.
max_requests = 0
preload_app = False
forwarded_allow_ips = os.environ.get("GUNICORN_FORWARDED_ALLOW_IPS", "127.0.0.1")
proc_name = os.environ.get("GUNICORN_PROC_NAME", "community")


def on_starting(server):
    logger = logging.getLogger("gunicorn.error")
    if workers != 1:
        logger.warning("%s workers configured; live feed updates only reach clients on the same worker", workers)
    logger.info("Starting community: workers=%s threads=%s timeout=%ss", workers, threads, timeout)


def worker_abort(worker):
    logging.getLogger("gunicorn.error").warning("Worker %s timed out after %ss", worker.pid, timeout)
