from .backend import PostgresStateStore

__all__ = ["PostgresStateStore"]
