from typing import Optional

from django.core.cache import cache


def get_metric_cache_key(metric: str, label_values: Optional[tuple]):
    """Return metric cache key with labels"""
    key = metric
    if label_values:
        normalized_label_values = (str(label_value).replace('_', '') for label_value in label_values)
        key += '__' + '_'.join(normalized_label_values)
    return key


def metric_incr(metric: str, amount: int = 1, labels: Optional[tuple] = None):
    """ Log an event for a Counter metric """
    metric_key = get_metric_cache_key(metric, labels)
    try:
        cache.incr(metric_key, amount)
    except ValueError:
        cache.set(metric_key, amount, None)


def metric_value(metric: str, labels: Optional[tuple] = None) -> int:
    return cache.get(get_metric_cache_key(metric, labels)) or 0
