from .http import RpcClient  # noqa: F401

__all__ = ["RpcClient"]
