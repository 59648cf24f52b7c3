"""
Cache utilities for NFL Playoff Picks
Short-lived response caching for the endpoints clients poll
"""

import functools

from flask import current_app, request

from app import cache


def make_cache_key(*args, **kwargs):
    """Generate a cache key from request path, query string and arguments"""
    path = request.path
    query = request.query_string.decode("utf-8", "replace")
    args_str = "_".join(str(arg) for arg in args)
    kwargs_str = "_".join(f"{k}_{v}" for k, v in sorted(kwargs.items()))
    return f"{path}_{query}_{args_str}_{kwargs_str}".replace("/", "_")


def cached_route(timeout=None, key_prefix="view", response_filter=None):
    """
    Decorator for caching route responses

    The wrapped view must return plain data (dict, or a (dict, status)
    tuple) so the result can be stored by any cache backend.

    Args:
        timeout: Cache timeout in seconds (default: POLL_INTERVAL)
        key_prefix: Prefix for cache key
        response_filter: Called with the view result; falsy skips caching
    """

    def decorator(f):
        @functools.wraps(f)
        def wrapped(*args, **kwargs):
            cache_key = f"{key_prefix}_{make_cache_key(*args, **kwargs)}"

            result = cache.get(cache_key)
            if result is not None:
                current_app.logger.debug(f"Cache hit for key: {cache_key}")
                return result

            result = f(*args, **kwargs)
            if response_filter is not None and not response_filter(result):
                return result

            cache.set(
                cache_key,
                result,
                timeout=timeout or current_app.config.get("POLL_INTERVAL", 25),
            )
            current_app.logger.debug(f"Cache set for key: {cache_key}")

            return result

        return wrapped

    return decorator


def invalidate_contest_cache(reason):
    """
    Drop cached leaderboard and stats responses after a write

    Args:
        reason: Short description for the log
    """
    # SimpleCache can't delete by pattern, so clear everything
    cache.clear()
    current_app.logger.debug(f"Cache cleared: {reason}")
