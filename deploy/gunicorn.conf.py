# Reverse proxy / tunnel should point to this local origin.
bind = "127.0.0.1:8000"

# Handlers are stateless apart from the short-lived session cache, which is
# per process. Threads give concurrency for the outbound backend calls.
workers = 2
threads = 8
worker_class = "gthread"

# Health checks against self-hosted services can take up to 30s.
timeout = 60
graceful_timeout = 30
keepalive = 5

# Let systemd/journald handle logs.
accesslog = "-"
errorlog = "-"
loglevel = "info"
capture_output = True

# Restart workers periodically to limit long-lived memory growth.
max_requests = 1000
max_requests_jitter = 100

# Security/robustness
limit_request_line = 4094
limit_request_fields = 100
limit_request_field_size = 8190
