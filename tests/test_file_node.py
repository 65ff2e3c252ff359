import pytest
from fastapi.exceptions import HTTPException
from fastapi.datastructures import UploadFile
from io import BytesIO
from enacit4r_storage.utils.files import FileNodeBuilder, FileChecker

def test_empty_file_node():
  file_node = FileNodeBuilder.from_name(name=".").build()
  assert file_node.name == "."
  assert file_node.path == None
  assert file_node.size == None
  assert file_node.is_file == False
  assert file_node.children == []

def test_multiple_file_node():
  file_node = FileNodeBuilder.from_name(name="ns", path="storage:///ns/") \
    .add_file("README.md", 100) \
    .add_file("docs/file.txt", 100) \
    .add_file("pub/images/file.webp", 50) \
    .build()
  assert file_node.name == "ns"
  assert file_node.path == "storage:///ns/"
  assert file_node.is_file == False
  assert len(file_node.children) == 3
  for child_node in file_node.children:
    if child_node.name == "README.md":
      assert child_node.path == "storage:///ns/README.md"
      assert child_node.size == 100
      assert child_node.is_file == True
      assert child_node.children == []
    elif child_node.name == "docs":
      assert child_node.path == "storage:///ns/docs/"
      assert child_node.size == None
      assert child_node.is_file == False
      assert len(child_node.children) == 1
      grandchild_node = child_node.children[0]
      assert grandchild_node.name == "file.txt"
      assert grandchild_node.path == "storage:///ns/docs/file.txt"
      assert grandchild_node.size == 100
      assert grandchild_node.is_file == True
    elif child_node.name == "pub":
      assert child_node.path == "storage:///ns/pub/"
      assert child_node.is_file == False
      grandchild_node = child_node.children[0]
      assert grandchild_node.name == "images"
      assert grandchild_node.path == "storage:///ns/pub/images/"
      assert grandchild_node.is_file == False
      greatgrandchild_node = grandchild_node.children[0]
      assert greatgrandchild_node.name == "file.webp"
      assert greatgrandchild_node.path == "storage:///ns/pub/images/file.webp"
      assert greatgrandchild_node.size == 50
      assert greatgrandchild_node.is_file == True
    else:
      assert False, child_node.name

def test_directory_then_files():
  file_node = FileNodeBuilder.from_name(name="ns", path="storage:///ns/") \
    .add_directory("docs/") \
    .add_directory("empty/") \
    .add_file("docs/file.txt", 10) \
    .build()
  assert [child.name for child in file_node.children] == ["docs", "empty"]
  docs = file_node.children[0]
  assert docs.is_file == False
  assert [child.name for child in docs.children] == ["file.txt"]
  assert file_node.children[1].children == []

def test_relative_root():
  file_node = FileNodeBuilder.from_name(name=".").add_file("docs/file.txt", 1).build()
  assert file_node.children[0].path == "docs/"
  assert file_node.children[0].children[0].path == "docs/file.txt"

@pytest.mark.asyncio
async def test_file_checker():
  checker = FileChecker(max_size=4)
  small = UploadFile(filename="small.txt", file=BytesIO(b"1234"))
  files = await checker.check_size([small])
  assert (await files[0].read()) == b"1234"
  large = UploadFile(filename="large.txt", file=BytesIO(b"12345"))
  with pytest.raises(HTTPException) as exc_info:
    await checker.check_size([large])
  assert exc_info.value.status_code == 400
