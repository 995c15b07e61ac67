# gunicorn.conf.py
# Serves clipscribe.main_api:app; JSON log formatting is set up by the app.
#   gunicorn -c gunicorn.conf.py clipscribe.main_api:app

import os

bind = os.getenv("BIND", "0.0.0.0:8000")
workers = int(os.getenv("WEB_CONCURRENCY", 2))
worker_class = "uvicorn.workers.UvicornWorker"
wsgi_app = "clipscribe.main_api:app"

# Access and error logs go to stdout and stderr
accesslog = "-"
errorlog = "-"

forwarded_allow_ips = "*"
