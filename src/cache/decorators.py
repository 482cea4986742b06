"""
Cache decorators for services that change what cached search results depend on
"""
import functools
import inspect
import logging
from typing import Any, Callable, Optional

logger = logging.getLogger(__name__)

def _extract_user_id(func: Callable, args: tuple, kwargs: dict, arg_name: str) -> Optional[int]:
    """Find the user id argument by name, positionally or by keyword"""
    if arg_name in kwargs:
        return kwargs[arg_name]
    try:
        bound = inspect.signature(func).bind_partial(*args, **kwargs)
    except TypeError:
        return None
    return bound.arguments.get(arg_name)

def invalidate_search_cache_on_update(user_id_arg: str = "user_id", cache_attr: str = "search_cache"):
    """
    Decorator to invalidate a user's cached search results after a method runs
    Use on service methods that change scoring inputs (e.g. profile recalculation)

    Args:
        user_id_arg: Name of the argument holding the user id
        cache_attr: Attribute on the service instance holding the search cache
    """
    def decorator(func: Callable) -> Callable:
        @functools.wraps(func)
        def wrapper(self, *args, **kwargs) -> Any:
            # Execute the function first
            result = func(self, *args, **kwargs)

            cache = getattr(self, cache_attr, None)
            if cache is None:
                return result

            user_id = _extract_user_id(func, (self,) + args, kwargs, user_id_arg)
            if user_id is None:
                logger.warning(f"{func.__name__}: no {user_id_arg} found, search cache not invalidated")
                return result

            try:
                removed = cache.invalidate_user(user_id)
                logger.debug(f"Invalidated {removed} cached searches for user {user_id} after {func.__name__}")
            except Exception as e:
                logger.error(f"Error invalidating cache: {e}")

            return result
        return wrapper
    return decorator
