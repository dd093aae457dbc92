"""Web UI serving: index page plus static asset directories."""

from pathlib import Path

from fastapi import APIRouter, FastAPI, HTTPException, Request
from fastapi.responses import FileResponse
from fastapi.staticfiles import StaticFiles

router = APIRouter()

ASSET_DIRECTORIES = ("static", "css", "img", "js")


@router.get("/", include_in_schema=False)
def index(request: Request) -> FileResponse:
    index_file = Path(request.app.state.ui_directory) / "index.html"
    if not index_file.is_file():
        raise HTTPException(status_code=404, detail="Not Found")
    return FileResponse(index_file, headers={"Cache-Control": "no-store"})


def mount_ui(app: FastAPI, ui_directory: Path) -> None:
    """Mount each asset directory that exists under ui_directory."""
    app.state.ui_directory = str(ui_directory)
    for name in ASSET_DIRECTORIES:
        directory = ui_directory / name
        if directory.is_dir():
            app.mount(f"/{name}", StaticFiles(directory=str(directory)), name=name)
