from __future__ import annotations

from fastapi import APIRouter, HTTPException, Request
from fastapi.responses import Response

from notekeep.services.repository_storage import (
    RepositoryLoadStatus,
    RepositoryStorageServiceBase,
)

router = APIRouter(prefix="/repository", tags=["repository"])


def _get_storage(request: Request) -> RepositoryStorageServiceBase:
    svc = getattr(getattr(request.app, "state", None), "repository_storage", None)
    if not svc:
        raise RuntimeError("Repository storage is not configured")
    return svc


def _backend_name(request: Request) -> str:
    settings = getattr(request.app.state, "settings", None)
    return settings.storage_backend if settings else ""


@router.get("/info")
def repository_info(request: Request):
    svc = _get_storage(request)
    return {
        "location": svc.get_location(),
        "backend": _backend_name(request),
        "file_name": svc.file_name,
    }


@router.get("")
def repository_summary(request: Request):
    svc = _get_storage(request)
    status, repository = svc.load_repository_or_default()
    if status == RepositoryLoadStatus.INVALID_REPOSITORY:
        raise HTTPException(500, svc.language_service.load_text("error_loading_repository"))
    return {
        "status": status.value,
        "id": repository.id,
        "revision": repository.revision,
        "notes": len(repository.notes),
        "tags": repository.collect_active_tags(),
    }


@router.get("/file")
def repository_file(request: Request):
    svc = _get_storage(request)
    content = svc.load_repository_file()
    if content is None:
        raise HTTPException(404, svc.language_service.load_text("error_no_repository_file"))
    return Response(
        content,
        media_type="application/xml",
        headers={"Content-Disposition": f'attachment; filename="{svc.file_name}"'},
    )


@router.post("/import")
async def repository_import(request: Request):
    svc = _get_storage(request)
    texts = svc.language_service
    content = await request.body()
    ok, repository = svc.try_load_repository_from_file(content)
    if not ok or repository is None:
        if svc.is_too_new_repository_file(content):
            raise HTTPException(400, texts.load_text("error_repository_too_new"))
        raise HTTPException(400, texts.load_text("error_invalid_repository_file"))
    if not svc.try_save_repository(repository):
        raise HTTPException(500, texts.load_text("error_saving_repository"))
    return {
        "ok": True,
        "message": texts.load_text_fmt("repository_imported", len(repository.notes)),
        "notes": len(repository.notes),
    }


@router.post("/reload")
def repository_reload(request: Request):
    _get_storage(request).clear_cache()
    return {"ok": True}
