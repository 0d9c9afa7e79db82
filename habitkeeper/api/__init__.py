from habitkeeper.api.routes import router

__all__ = ["router"]
