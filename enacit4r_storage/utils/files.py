from fastapi.exceptions import HTTPException
from fastapi.datastructures import UploadFile
from enacit4r_storage.models.files import FileNode

# 100 MB in binary
DEFAULT_MAX_FILE_SIZE = 100 * 1024 * 1024


class FileChecker:
    """A class that checks the size of files
    """

    def __init__(self, max_size: int = DEFAULT_MAX_FILE_SIZE):
        self.max_size = max_size

    async def check_size(self, files: list[UploadFile]):
        for file in files:
            content = await file.read()
            await self._check_content_size(content)
            await file.seek(0)
        return files

    async def _check_content_size(self, content: bytes | str):
        file_size = len(content)
        if file_size > self.max_size:
            detail = f"File size {file_size} exceeds max size {self.max_size}"
            raise HTTPException(400, detail=detail)

class FileNodeBuilder:
    """A node in a tree representing a file system, used to represent the content of a directory
    """

    def __init__(self, name, path=None, size=None, is_file=False):
        self.root = FileNode(name = name,
                             path = path,
                             size = size,
                             is_file = is_file)

    @classmethod
    def from_name(cls, name: str, path: str = None):
        """Make a root directory node from which children will be added.

        Args:
            name (str): The root node name
            path (str, optional): The root node path, ending with a separator

        Returns:
            FileNodeBuilder: The builder
        """
        return cls(name = name, path = path, is_file = False)

    def add_directory(self, relative_path: str):
        """Add a directory to the tree, from the root node makes the intermediate folder nodes.

        Args:
            relative_path (str): The directory path relative to the root node, e.g. "docs/images/"
        """
        self._add_node(relative_path.rstrip("/"), is_file = False)
        return self

    def add_file(self, relative_path: str, size: int = None):
        """Add a file to the tree, from the root node makes the intermediate folder nodes.

        Args:
            relative_path (str): The file path relative to the root node, e.g. "docs/file.txt"
            size (int, optional): The file size in bytes
        """
        self._add_node(relative_path, is_file = True, size = size)
        return self

    def _add_node(self, relative_path: str, is_file: bool, size: int = None):
        current_node = self.root
        parts = [part for part in relative_path.split("/") if part]
        root_path = self.root.path or ""
        if root_path and not root_path.endswith("/"):
            root_path += "/"

        for i, part in enumerate(parts):
            is_last = i == len(parts) - 1
            matching_child = next(
                (child for child in current_node.children if child.name == part), None)

            if matching_child is None:
                new_is_file = is_file and is_last
                new_path = root_path + "/".join(parts[:i + 1])
                if not new_is_file:
                    new_path += "/"
                new_node = FileNode(name = part, path = new_path, size = size if new_is_file else None, is_file = new_is_file)
                current_node.children.append(new_node)
                current_node = new_node
            else:
                current_node = matching_child

    def build(self) -> FileNode:
        """Get the root of the tree of file nodes.

        Returns:
            FileNode: The root file node
        """
        return self.root
