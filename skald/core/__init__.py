from skald.core.config import ServerConfig

__all__ = ["ServerConfig"]
