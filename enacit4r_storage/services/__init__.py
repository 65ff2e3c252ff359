from .client import StoreClient
from .errors import StorageError, InvalidPathError, NotFoundError, StorageIOError, translate_error
from ..models.files import FileAttributes, FileNode, ObjectProperties
from .paths import PathResolver
from .markers import DirectoryMarkers
from .listing import KeyEnumerator
from .attributes import AttributeResolver
from .mutations import MutationCoordinator
from .filesystem import FileSystem, BlockingFileSystem
from .local import LocalStoreClient
from .s3 import S3Service, S3StoreClient
