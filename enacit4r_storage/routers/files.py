from typing import List, Optional
from contextlib import contextmanager
from fastapi import APIRouter, File, Header, HTTPException, Query, UploadFile
from fastapi.responses import Response
from ..models.files import FileAttributes
from ..services.errors import InvalidPathError, NotFoundError, StorageError
from ..services.filesystem import FileSystem
from ..utils.files import FileChecker, DEFAULT_MAX_FILE_SIZE
import logging


@contextmanager
def http_errors():
    """Map the storage errors raised in the block to HTTP errors."""
    try:
        yield
    except InvalidPathError as e:
        raise HTTPException(status_code=400, detail=e.message)
    except NotFoundError as e:
        raise HTTPException(status_code=404, detail=e.message)
    except StorageError as e:
        logging.error(f"Storage failure: {e}")
        raise HTTPException(status_code=502, detail=e.message)


def make_files_router(fs: FileSystem, max_size: int = DEFAULT_MAX_FILE_SIZE) -> APIRouter:
    """Make the router exposing a file system over HTTP. The tenant is read
    from the X-Tenant-Id header, no header means no tenant prefixing.

    Args:
        fs (FileSystem): The file system.
        max_size (int, optional): The maximum upload size in bytes. Defaults to DEFAULT_MAX_FILE_SIZE.

    Returns:
        APIRouter: The router, with routes under /files
    """
    router = APIRouter(prefix="/files", tags=["Files"])
    checker = FileChecker(max_size)

    @router.get("/content")
    async def get_content(path: str = Query(...), x_tenant_id: Optional[str] = Header(None)):
        with http_errors():
            content = await fs.get(x_tenant_id, path)
        return Response(content=content.getvalue(), media_type="application/octet-stream")

    @router.put("/content")
    async def put_content(path: str = Query(...), file: UploadFile = File(...), x_tenant_id: Optional[str] = Header(None)):
        await checker.check_size([file])
        data = await file.read()
        with http_errors():
            uri = await fs.put(x_tenant_id, path, data)
        return {"path": uri}

    @router.get("/list", response_model=List[FileAttributes])
    async def list_directory(path: str = Query("/"), x_tenant_id: Optional[str] = Header(None)):
        with http_errors():
            return await fs.list(x_tenant_id, path)

    @router.get("/attributes", response_model=FileAttributes)
    async def get_attributes(path: str = Query(...), x_tenant_id: Optional[str] = Header(None)):
        with http_errors():
            return await fs.get_attributes(x_tenant_id, path)

    @router.get("/exists")
    async def exists(path: str = Query(...), x_tenant_id: Optional[str] = Header(None)):
        with http_errors():
            return {"exists": await fs.exists(x_tenant_id, path)}

    @router.post("/directory")
    async def create_directory(path: str = Query(...), x_tenant_id: Optional[str] = Header(None)):
        with http_errors():
            return {"path": await fs.create_directory(x_tenant_id, path)}

    @router.post("/move")
    async def move(source: str = Query(...), destination: str = Query(...), x_tenant_id: Optional[str] = Header(None)):
        with http_errors():
            return {"path": await fs.move(x_tenant_id, source, destination)}

    @router.delete("")
    async def delete(path: str = Query(...), x_tenant_id: Optional[str] = Header(None)):
        with http_errors():
            return {"deleted": await fs.delete(x_tenant_id, path)}

    @router.delete("/prefix")
    async def delete_by_prefix(path: str = Query(...), x_tenant_id: Optional[str] = Header(None)):
        with http_errors():
            return {"deleted": await fs.delete_by_prefix(x_tenant_id, path)}

    return router
