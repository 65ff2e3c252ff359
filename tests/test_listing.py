import pytest
from enacit4r_storage.services.listing import KeyEnumerator
from enacit4r_storage.models.files import ListedKey


@pytest.fixture
def tree_client(memory_client):
    """Example tree with markers for /main/, /main/ns/, /main/ns/folder/, /main/ns/folder/sub/ and /main/ns/empty/."""
    for key in ["/main/.directory", "/main/ns/.directory", "/main/ns/folder/.directory",
                "/main/ns/folder/sub/.directory", "/main/ns/empty/.directory"]:
        memory_client.objects[key] = (b"", {}, None)
    for key in ["/main/ns/file.txt", "/main/ns/folder/a.txt", "/main/ns/folder/sub/b.txt"]:
        memory_client.objects[key] = (b"data", {}, None)
    return memory_client


async def collect(client, prefix, recursive=True, include_directories=True):
    return [entry async for entry in KeyEnumerator().list(client, prefix, recursive, include_directories)]


class TestKeyEnumerator:
    """Test suite for KeyEnumerator."""

    @pytest.mark.asyncio
    async def test_recursive_files_only(self, tree_client):
        """Test a recursive listing without directories."""
        entries = await collect(tree_client, "/main/ns/", include_directories=False)
        assert sorted(entries) == [
            ListedKey("/main/ns/file.txt", False),
            ListedKey("/main/ns/folder/a.txt", False),
            ListedKey("/main/ns/folder/sub/b.txt", False),
        ]

    @pytest.mark.asyncio
    async def test_recursive_with_directories(self, tree_client):
        """Test markers become directory entries and the prefix itself is skipped."""
        entries = await collect(tree_client, "/main/ns/")
        directories = sorted(entry.key for entry in entries if entry.is_directory)
        assert directories == ["/main/ns/empty/", "/main/ns/folder/", "/main/ns/folder/sub/"]
        assert not any(entry.key.endswith(".directory") for entry in entries)

    @pytest.mark.asyncio
    async def test_one_level(self, tree_client):
        """Test a one-level listing gives the immediate children."""
        entries = await collect(tree_client, "/main/ns/folder/", recursive=False)
        assert sorted(entries) == [
            ListedKey("/main/ns/folder/a.txt", False),
            ListedKey("/main/ns/folder/sub/", True),
        ]

    @pytest.mark.asyncio
    async def test_one_level_empty_directory(self, tree_client):
        """Test an empty directory is listed as a directory entry."""
        entries = await collect(tree_client, "/main/ns/", recursive=False)
        assert ListedKey("/main/ns/empty/", True) in entries
        assert ListedKey("/main/ns/folder/", True) in entries
        assert ListedKey("/main/ns/file.txt", False) in entries
        assert len(entries) == 3

    @pytest.mark.asyncio
    async def test_prefix_without_marker_skipped(self, tree_client):
        """Test a common prefix with no marker has no directory identity."""
        tree_client.objects["/main/ns/orphan/c.txt"] = (b"data", {}, None)
        entries = await collect(tree_client, "/main/ns/", recursive=False)
        assert not any(entry.key == "/main/ns/orphan/" for entry in entries)

    @pytest.mark.asyncio
    async def test_one_level_without_directories(self, tree_client):
        """Test directories are dropped when not requested."""
        entries = await collect(tree_client, "/main/ns/", recursive=False, include_directories=False)
        assert entries == [ListedKey("/main/ns/file.txt", False)]

    @pytest.mark.asyncio
    async def test_empty_prefix(self, memory_client):
        """Test listing an absent prefix gives nothing."""
        assert await collect(memory_client, "/main/none/") == []

    @pytest.mark.asyncio
    async def test_queries_store_each_time(self, tree_client):
        """Test results are not cached between calls."""
        first = await collect(tree_client, "/main/ns/", include_directories=False)
        tree_client.objects["/main/ns/new.txt"] = (b"data", {}, None)
        second = await collect(tree_client, "/main/ns/", include_directories=False)
        assert len(second) == len(first) + 1
