from . import health, history, review, translate

__all__ = ["health", "history", "review", "translate"]
