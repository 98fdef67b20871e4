"""
metrics.py - Engine metrics for monitoring
"""
from prometheus_client import Counter, Histogram, Gauge
from functools import wraps
import time

annotation_count = Counter(
    'graph_nlp_annotations_total',
    'Annotate-and-persist operations',
    ['processor', 'status']
)

annotation_duration = Histogram(
    'graph_nlp_annotation_duration_seconds',
    'Annotation duration, persistence included',
    ['processor']
)

sentiment_updates = Counter(
    'graph_nlp_sentiment_updates_total',
    'Sentiment updates applied to stored texts',
    ['processor']
)

filter_count = Counter(
    'graph_nlp_filter_requests_total',
    'Filter evaluations',
    ['result']
)

events_published = Counter(
    'graph_nlp_events_published_total',
    'Lifecycle events published',
    ['event']
)

similarity_processed = Counter(
    'graph_nlp_similarity_processed_total',
    'Entities for which similarity produced at least one result',
    ['strategy']
)

similarity_duration = Histogram(
    'graph_nlp_similarity_duration_seconds',
    'Similarity computation duration',
    ['strategy']
)

conceptnet_requests = Counter(
    'graph_nlp_conceptnet_requests_total',
    'ConceptNet API requests',
    ['status']
)

circuit_breaker_state = Gauge(
    'graph_nlp_circuit_breaker_state',
    'Circuit breaker state (0=closed, 1=open, 2=half-open)',
    ['service']
)

ranking_duration = Histogram(
    'graph_nlp_ranking_duration_seconds',
    'PageRank and TextRank duration, persistence included',
    ['algorithm']
)


def track_duration(histogram: Histogram, label: str):
    """Decorator to observe the duration of a synchronous call"""
    def decorator(func):
        @wraps(func)
        def wrapper(*args, **kwargs):
            start = time.time()
            try:
                return func(*args, **kwargs)
            finally:
                histogram.labels(label).observe(time.time() - start)
        return wrapper
    return decorator
