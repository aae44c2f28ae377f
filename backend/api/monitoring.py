"""
Monitoring and metrics collection for the application.
"""
import time
from functools import wraps
from typing import Callable
from prometheus_client import Counter, Histogram, Gauge
from .logging_config import get_logger

logger = get_logger("monitoring")

# Prometheus metrics
http_requests_total = Counter(
    'http_requests_total',
    'Total HTTP requests',
    ['method', 'endpoint', 'status']
)

http_request_duration_seconds = Histogram(
    'http_request_duration_seconds',
    'HTTP request duration in seconds',
    ['method', 'endpoint']
)

websocket_connections = Gauge(
    'websocket_connections_total',
    'Current WebSocket connections'
)

joined_users = Gauge(
    'joined_users_total',
    'Number of participants that have joined the board'
)

board_cells = Gauge(
    'board_cells_total',
    'Number of occupied board cells'
)

session_events = Counter(
    'session_events_total',
    'Inbound session events by outcome',
    ['event', 'outcome']
)

uploads = Counter(
    'uploads_total',
    'Image uploads',
    ['kind', 'status']
)


def track_performance(func: Callable) -> Callable:
    """Decorator to track coroutine endpoint performance."""
    @wraps(func)
    async def async_wrapper(*args, **kwargs):
        start_time = time.time()
        try:
            result = await func(*args, **kwargs)
            duration = time.time() - start_time
            logger.debug(
                "function_performance",
                function=func.__name__,
                duration=duration,
                status="success"
            )
            return result
        except Exception as e:
            duration = time.time() - start_time
            logger.error(
                "function_performance",
                function=func.__name__,
                duration=duration,
                status="error",
                error=str(e)
            )
            raise

    return async_wrapper
