"""Serves the static browser client."""

from __future__ import annotations

from pathlib import Path

from fastapi import APIRouter, Depends, HTTPException
from fastapi.responses import FileResponse

from api.dependencies import get_app_settings
from config.settings import Settings

router = APIRouter()


def _existing_file_under(root: Path, full_path: str) -> Path | None:
    try:
        candidate = (root / full_path).resolve()
        if candidate.is_file() and candidate.is_relative_to(root):
            return candidate
    except (OSError, ValueError):
        # The OS rejects the path (embedded NUL, name too long).
        return None
    return None


def resolve_static_file(build_dir: Path, full_path: str) -> Path | None:
    """Return the file to serve for `full_path`, falling back to index.html."""

    root = build_dir.resolve()
    if full_path:
        found = _existing_file_under(root, full_path)
        if found is not None:
            return found
    index = root / "index.html"
    if index.is_file():
        return index
    return None


@router.get("/{full_path:path}", include_in_schema=False)
async def serve_frontend(full_path: str, settings: Settings = Depends(get_app_settings)) -> FileResponse:
    path = resolve_static_file(settings.frontend_build_dir, full_path)
    if path is None:
        raise HTTPException(status_code=404, detail="Not found")
    return FileResponse(path)
