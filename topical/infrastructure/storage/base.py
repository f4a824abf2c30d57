from typing import Dict, Any, Optional, Protocol, runtime_checkable


@runtime_checkable
class Storage(Protocol):
    """Key-value backend holding one serialized topic table per conversation"""

    async def read(self, key: str) -> Optional[Dict[str, Any]]:
        """Return the stored document, or None when the key is absent"""
        ...

    async def write(self, key: str, data: Dict[str, Any]) -> None:
        """Replace the stored document"""
        ...

    async def delete(self, key: str) -> bool:
        """Remove the document; return whether it existed"""
        ...
