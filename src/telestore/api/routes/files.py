"""File store endpoints."""

from contextlib import AsyncExitStack
from datetime import UTC, datetime
from typing import Literal

from fastapi import APIRouter, Header, Query, Request
from fastapi.responses import StreamingResponse
from pydantic import BaseModel, Field
from starlette.background import BackgroundTask

from telestore.api.deps import FSDep
from telestore.core.errors import ObjectNotFoundError
from telestore.core.types import FileObject, to_unix

router = APIRouter()


class EntryResponse(BaseModel):
    """Response model for one listing entry."""

    kind: Literal["file", "dir"]
    path: str
    size: int | None = None
    mod_time: int


class ListResponse(BaseModel):
    """Response model for a directory listing."""

    dir: str
    entries: list[EntryResponse]


class FileResponse(BaseModel):
    """Response model for file metadata."""

    path: str
    size: int
    mod_time: int


class SetModTimeRequest(BaseModel):
    """Request to change a file's modification time."""

    mod_time: int = Field(..., description="Modification time (unix seconds)")


def _file_response(obj: FileObject) -> FileResponse:
    return FileResponse(path=obj.remote, size=obj.size, mod_time=to_unix(obj.mod_time))


@router.get("/files", response_model=ListResponse)
async def list_files(
    fs: FSDep,
    dir: str = Query("", description="Directory to list"),
) -> ListResponse:
    """
    List the files and subdirectories of a directory.

    A directory that doesn't exist lists as empty.
    """
    entries = await fs.list(dir)
    return ListResponse(
        dir=dir,
        entries=[EntryResponse(**entry.to_dict()) for entry in entries],
    )


@router.get("/files/{path:path}")
async def download_file(path: str, fs: FSDep) -> StreamingResponse:
    """
    Stream the content of a file.

    The download is started before the response, so resolve and HTTP
    status failures still map to an error status.
    """
    obj = await fs.stat(path)

    stack = AsyncExitStack()
    chunks = await stack.enter_async_context(fs.open(path))

    return StreamingResponse(
        chunks,
        media_type="application/octet-stream",
        headers={"X-Mod-Time": str(to_unix(obj.mod_time))},
        background=BackgroundTask(stack.aclose),
    )


@router.put("/files/{path:path}", response_model=FileResponse)
async def upload_file(
    path: str,
    request: Request,
    fs: FSDep,
    x_mod_time: int | None = Header(None, description="Modification time (unix seconds)"),
) -> FileResponse:
    """
    Store the request body at path.

    Existing files are updated in place, new files are created.
    """
    data = await request.body()
    mod_time = (
        datetime.fromtimestamp(x_mod_time, tz=UTC) if x_mod_time is not None else None
    )

    try:
        await fs.stat(path)
    except ObjectNotFoundError:
        obj = await fs.put(path, data, size=len(data), mod_time=mod_time)
    else:
        obj = await fs.update(path, data, size=len(data))
        if mod_time is not None:
            obj = await fs.set_mod_time(path, mod_time)

    return _file_response(obj)


@router.get("/stat/{path:path}", response_model=FileResponse)
async def stat_file(path: str, fs: FSDep) -> FileResponse:
    """Return file metadata."""
    return _file_response(await fs.stat(path))


@router.patch("/stat/{path:path}", response_model=FileResponse)
async def set_mod_time(path: str, body: SetModTimeRequest, fs: FSDep) -> FileResponse:
    """Change a file's modification time."""
    obj = await fs.set_mod_time(path, datetime.fromtimestamp(body.mod_time, tz=UTC))
    return _file_response(obj)


@router.delete("/files/{path:path}")
async def delete_file(path: str, fs: FSDep) -> dict[str, str]:
    """Delete a file."""
    await fs.remove(path)
    return {"status": "deleted", "path": path}
