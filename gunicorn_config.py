import os
import multiprocessing

# gunicorn -c gunicorn_config.py wsgi:app
bind = f"0.0.0.0:{os.environ.get('PORT', '5000')}"

workers = int(os.environ.get("WEB_CONCURRENCY", max(2, multiprocessing.cpu_count())))
worker_class = os.environ.get("GUNICORN_WORKER_CLASS", "gevent")
worker_connections = int(os.environ.get("GUNICORN_WORKER_CONNECTIONS", "100"))
timeout = int(os.environ.get("GUNICORN_TIMEOUT", "30"))
graceful_timeout = 20
keepalive = 5

# Tables are created once in the master instead of racing in every worker
preload_app = os.environ.get("GUNICORN_PRELOAD", "true").lower() == "true"

loglevel = os.environ.get("LOG_LEVEL", "info").lower()
accesslog = '-'
errorlog = '-'
access_log_format = '%(h)s "%(r)s" %(s)s %(b)s %(M)sms request_id=%({x-request-id}o)s'
