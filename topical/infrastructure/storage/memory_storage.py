from typing import Dict, Any, Optional
import asyncio
from datetime import datetime
import json


class MemoryStorage:
    """In-process storage that keeps each document as a JSON string"""

    def __init__(self):
        self.documents: Dict[str, Dict[str, Any]] = {}
        self._lock = asyncio.Lock()

    async def write(self, key: str, data: Dict[str, Any]) -> None:
        """Store a serialized copy of the document"""

        async with self._lock:
            self.documents[key] = {
                "value": json.dumps(data),
                "updated_at": datetime.utcnow()
            }

    async def read(self, key: str) -> Optional[Dict[str, Any]]:
        """Get an independent copy of the document"""

        async with self._lock:
            if key not in self.documents:
                return None

            return json.loads(self.documents[key]["value"])

    async def delete(self, key: str) -> bool:
        """Delete a key from storage"""

        async with self._lock:
            if key in self.documents:
                del self.documents[key]
                return True
            return False

    async def get_stats(self) -> Dict[str, Any]:
        """Get storage statistics"""

        async with self._lock:
            return {
                "total_keys": len(self.documents),
                "total_bytes": sum(len(entry["value"]) for entry in self.documents.values())
            }
