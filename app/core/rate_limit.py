"""
Shared slowapi limiter, keyed by client IP.

Attached to ``app.state.limiter`` in ``create_app``; endpoint modules
decorate their routes with ``limiter.limit(...)``.
"""

from __future__ import annotations

from slowapi import Limiter
from slowapi.util import get_remote_address

limiter = Limiter(key_func=get_remote_address)
