from .instance_store import InstanceStore

__all__ = ["InstanceStore"]
