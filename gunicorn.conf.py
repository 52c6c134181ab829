"""
Gunicorn Configuration

Runs the FastAPI app with Uvicorn workers. Aggregation runs are I/O bound and
sequential per request, so a handful of workers goes a long way.
"""

import multiprocessing
import os

# Server socket
bind = os.getenv("BIND", "0.0.0.0:8080")
backlog = 512

# Worker processes
workers = int(os.getenv("WORKERS", min(multiprocessing.cpu_count() + 1, 4)))
worker_class = "uvicorn.workers.UvicornWorker"
max_requests = 5000
max_requests_jitter = 500
# A full 100-page walk must fit inside the worker timeout
timeout = int(os.getenv("WORKER_TIMEOUT", 180))
keepalive = 5
graceful_timeout = 30

proc_name = "catalog-insights-api"

# Logging
errorlog = "-"
loglevel = os.getenv("LOG_LEVEL", "info").lower()
accesslog = "-"


def when_ready(server):
    """Called when server is ready to receive connections."""
    server.log.info("Catalog Insights API ready on %s", bind)


def worker_abort(worker):
    """Called when a worker times out, typically a stuck upstream walk."""
    worker.log.warning("Worker %s aborted; in-flight aggregation discarded", worker.pid)
