"""AI Red Team Lab installer (Python-first, state-driven).

Core design goals:
- One manifest shared by every platform
- Resumable, idempotent steps
- Fatal vs advisory failures kept apart
- Bounded waits for background services
"""

__all__ = []
