from cfahub.config.settings import settings

__all__ = ["settings"]
