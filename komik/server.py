"""Read-only JSON view of the download tree, for the browser viewer."""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, Optional
from urllib.parse import quote

from fastapi import FastAPI, HTTPException, Query
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import FileResponse, HTMLResponse, JSONResponse

from .workspace import is_image_file, natural_sort_key


@dataclass
class ServerConfig:
    root: Path
    host: str = "0.0.0.0"
    port: int = 3000


def image_locator(path: Path) -> str:
    return f"/api/image?path={quote(str(path), safe='')}"


def _subdirs(folder: Path):
    return sorted(
        (p.name for p in folder.iterdir() if p.is_dir()), key=natural_sort_key
    )


def read_tree(folder: Path) -> Dict[str, Any]:
    tree: Dict[str, Any] = {}
    for item in sorted(folder.iterdir(), key=lambda p: natural_sort_key(p.name)):
        if item.is_dir():
            tree[item.name] = read_tree(item)
        elif item.is_file() and is_image_file(item.name):
            tree[item.name] = image_locator(item)
    return tree


def create_app(config: ServerConfig) -> FastAPI:
    root = config.root.expanduser().resolve()
    if not root.exists():
        raise FileNotFoundError(f"Output root not found: {root}")

    app = FastAPI(title="komik viewer")
    app.state.config = config
    app.state.root = root
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_methods=["GET", "POST", "OPTIONS"],
        allow_headers=["Content-Type"],
    )

    def _resolve_child(*parts: str) -> Path:
        candidate = root.joinpath(*parts).resolve()
        if candidate != root and root not in candidate.parents:
            raise HTTPException(status_code=404, detail="Not found")
        return candidate

    @app.get("/", response_class=HTMLResponse)
    def index() -> HTMLResponse:
        return HTMLResponse("<h1>komik</h1><p>See <a href='/api/komik'>/api/komik</a>.</p>")

    @app.get("/api/komik")
    def api_titles() -> JSONResponse:
        return JSONResponse(_subdirs(root))

    @app.get("/api/tree")
    def api_tree() -> JSONResponse:
        return JSONResponse(read_tree(root))

    @app.get("/api/komik/{title}")
    def api_chapters(title: str) -> JSONResponse:
        folder = _resolve_child(title)
        if not folder.is_dir():
            raise HTTPException(status_code=404, detail="Title not found")
        return JSONResponse(_subdirs(folder))

    @app.get("/api/komik/{title}/{chapter}")
    def api_images(title: str, chapter: str) -> JSONResponse:
        folder = _resolve_child(title, chapter)
        if not folder.is_dir():
            raise HTTPException(status_code=404, detail="Chapter not found")
        names = sorted(
            (n for n in os.listdir(folder) if is_image_file(n)), key=natural_sort_key
        )
        return JSONResponse([image_locator(folder / n) for n in names])

    @app.get("/api/image")
    def api_image(path: Optional[str] = Query(default=None)) -> FileResponse:
        if not path:
            raise HTTPException(status_code=400, detail="File path not specified")
        candidate = Path(path)
        if not candidate.is_absolute():
            candidate = root / candidate
        candidate = candidate.resolve()
        if root not in candidate.parents or not candidate.is_file():
            raise HTTPException(status_code=404, detail="File not found")
        return FileResponse(candidate)

    return app


def serve(config: ServerConfig) -> None:
    import uvicorn

    app = create_app(config)
    print(f"Server running at http://localhost:{config.port}")
    uvicorn.run(app, host=config.host, port=config.port, log_level="info")


__all__ = ["ServerConfig", "create_app", "read_tree", "serve"]
