import pytest
from datetime import datetime, timezone
from io import BytesIO
from enacit4r_storage.services.client import StoreClient
from enacit4r_storage.services.errors import NotFoundError
from enacit4r_storage.models.files import ObjectProperties


class MemoryStoreClient(StoreClient):
    """Flat in-memory object store recording every call, for tests."""

    def __init__(self):
        self.objects = {}
        self.calls = []

    async def exists(self, key):
        self.calls.append(("exists", key))
        return key in self.objects

    async def get_metadata(self, key):
        self.calls.append(("get_metadata", key))
        if key not in self.objects:
            raise NotFoundError(f"{key} (File not found)", key=key)
        data, metadata, modified = self.objects[key]
        return ObjectProperties(size=len(data), last_modified=modified, creation_time=modified, metadata=metadata)

    async def open_read(self, key):
        self.calls.append(("open_read", key))
        if key not in self.objects:
            raise NotFoundError(f"{key} (File not found)", key=key)
        return BytesIO(self.objects[key][0])

    async def write(self, key, data, metadata=None):
        self.calls.append(("write", key))
        self.objects[key] = (data, dict(metadata or {}), datetime.now(timezone.utc))

    async def delete(self, key):
        self.calls.append(("delete", key))
        if key not in self.objects:
            raise NotFoundError(f"{key} (File not found)", key=key)
        del self.objects[key]

    async def list_by_prefix(self, prefix, delimiter=None):
        self.calls.append(("list_by_prefix", prefix))
        keys = []
        common_prefixes = []
        for key in sorted(self.objects):
            if not key.startswith(prefix):
                continue
            rest = key[len(prefix):]
            if delimiter and delimiter in rest:
                common_prefix = prefix + rest[:rest.index(delimiter) + 1]
                if common_prefix not in common_prefixes:
                    common_prefixes.append(common_prefix)
                continue
            keys.append(key)
        for key in keys + common_prefixes:
            yield key

    async def copy(self, source_key, destination_key):
        self.calls.append(("copy", source_key, destination_key))
        if source_key not in self.objects:
            raise NotFoundError(f"{source_key} (File not found)", key=source_key)
        data, metadata, _ = self.objects[source_key]
        self.objects[destination_key] = (data, dict(metadata), datetime.now(timezone.utc))


@pytest.fixture
def memory_client():
    """Create an empty in-memory store client."""
    return MemoryStoreClient()
