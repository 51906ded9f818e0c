# tanglemap/core/limiter.py
from slowapi import Limiter
from slowapi.util import get_remote_address
from tanglemap.core.config import settings

def get_window_key(request) -> str:
    """
    Returns the host window id from the request header, falling back to the remote address.
    Several map windows on one machine then get separate budgets.
    """
    window_id = request.headers.get("x-window-id")
    return window_id or get_remote_address(request)

limiter = Limiter(
    key_func=get_window_key,
    storage_uri=settings.LIMITER_STORAGE_URI,
    strategy="fixed-window"
)
