"""AI Photo Studio — FastAPI Application.

This module is the single entry point for the web application.  It defines
the FastAPI ``app`` instance, all REST API routes, and the ``main()`` CLI
function that launches the uvicorn server.

Architecture
------------
- **Presets and UI text** come from :mod:`photostudio.core.presets` and are
  served to the page via ``GET /api/config``.
- **Image generation** is forwarded to
  :class:`~photostudio.core.generation.GeminiImageService`.  The blocking call
  runs in FastAPI's threadpool and never touches the library.
- **The image library** is held in memory on ``app.state.library`` and
  persisted by :class:`~photostudio.core.library.LibraryStore`.  Only
  ``async`` routes read or replace it, so all library mutations happen on the
  event loop, one at a time.
- **The HTML page** is served as a raw ``HTMLResponse``; it talks to the JSON
  API for everything else.

Endpoints
---------
========  ================================  ==================================
Method    Path                              Purpose
========  ================================  ==================================
GET       ``/``                             Serve the main HTML page
GET       ``/api/config``                   Features, styles, ratios, UI text
POST      ``/api/generate``                 Generate one image
POST      ``/api/upload``                   Decode an uploaded input image
POST      ``/api/download``                 Download a generated image
GET       ``/api/library``                  Saved images, newest first
POST      ``/api/library``                  Save a generated image
POST      ``/api/library/saved``            Is this image already saved?
GET       ``/api/library/export``           Download the library as JSON
POST      ``/api/library/import``           Merge an exported library file
GET       ``/api/library/{id}/reuse``       Saved image as a generation input
DELETE    ``/api/library/{id}``             Delete a saved image
========  ================================  ==================================

Usage
-----
CLI (installed entry point)::

    photostudio

Direct invocation::

    python -m photostudio.api.main
"""

from __future__ import annotations

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import FastAPI, File, HTTPException, Request, UploadFile
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import HTMLResponse, Response

from photostudio import __version__
from photostudio.api.models import GenerateRequest, ImageDataUrlRequest, SaveImageRequest
from photostudio.core import presets
from photostudio.core.config import config
from photostudio.core.errors import (
    GenerationError,
    ImportParseError,
    InvalidImageError,
    PersistenceError,
)
from photostudio.core.generation import GeminiImageService, GenerationRequest
from photostudio.core.images import (
    decode_base64,
    image_input_from_data_url,
    image_input_from_upload,
    split_data_url,
)
from photostudio.core.library import (
    EXPORT_FILENAME,
    Library,
    LibraryStore,
    find,
    is_saved,
    new_saved_image,
    select_for_reuse,
)
from photostudio.core.presets import FeatureKey
from photostudio.core.state import download_filename, generate_blocker, reuse_target
from photostudio.core.storage import FileStorage

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Application lifecycle — library and image service setup.
# ---------------------------------------------------------------------------


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Manage application startup.

    On startup:
        Builds the :class:`LibraryStore` over file storage in
        ``config.data_dir`` and loads the library.  A corrupt library file
        is logged and replaced by an empty library so the application always
        starts.  The image service is created without contacting the remote
        API; its client is built on the first generation.

    Args:
        app: The FastAPI application instance.

    Yields:
        Control back to the application for the duration of its lifetime.
    """
    storage = FileStorage(config.data_dir, quota_bytes=config.storage_quota_bytes)
    app.state.store = LibraryStore(storage, key=config.library_key)
    app.state.library = app.state.store.load_or_empty()
    app.state.image_service = GeminiImageService(config)
    logger.info(f"Library loaded with {len(app.state.library)} images.")

    yield


# ---------------------------------------------------------------------------
# FastAPI application instance.
# ---------------------------------------------------------------------------
app = FastAPI(
    title="AI Photo Studio",
    description="Prompt-driven image generation with a local image library.",
    version=__version__,
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# ---------------------------------------------------------------------------
# Helpers.
# ---------------------------------------------------------------------------


def _text(language: str | None) -> dict[str, str]:
    """Return the UI string table for a request's language."""
    return presets.ui_text(language or config.default_language)


def _persistence_failed(
    request: Request, error: PersistenceError, language: str | None
) -> HTTPException:
    """Keep the unsaved library in memory and report the storage failure."""
    request.app.state.library = error.library
    logger.warning(f"Library kept in memory only: {error}")
    return HTTPException(status_code=507, detail=_text(language)["storageError"])


def _library_payload(library: Library) -> dict:
    return {
        "total": len(library),
        "images": [image.to_record() for image in library],
    }


# ---------------------------------------------------------------------------
# Page and configuration routes.
# ---------------------------------------------------------------------------


@app.get("/", response_class=HTMLResponse)
async def index() -> HTMLResponse:
    """Serve the main application HTML page.

    Raises:
        HTTPException: 404 if ``index.html`` is not found.
    """
    index_path = config.templates_dir / "index.html"
    if index_path.exists():
        return HTMLResponse(content=index_path.read_text(encoding="utf-8"))
    raise HTTPException(status_code=404, detail="index.html not found")


@app.get("/api/config")
async def get_config(lang: str | None = None) -> dict:
    """Return everything the page needs to render in one language.

    Args:
        lang: Language code (``en`` or ``vi``).  Defaults to the configured
            language.

    Returns:
        Dictionary with keys ``version``, ``language``, ``languages``,
        ``features``, ``styles``, ``aspect_ratios``, ``ui_text`` and
        ``speech_locale``.
    """
    language = lang if lang in presets.LANGUAGES else config.default_language
    return {
        "version": __version__,
        "language": language,
        "languages": list(presets.LANGUAGES),
        "features": presets.features(language),
        "styles": presets.styles(language),
        "aspect_ratios": list(presets.ASPECT_RATIOS),
        "ui_text": presets.ui_text(language),
        "speech_locale": presets.speech_locale(language),
    }


# ---------------------------------------------------------------------------
# Generation routes.
# ---------------------------------------------------------------------------


@app.post("/api/generate")
def generate_image(req: GenerateRequest, request: Request) -> dict:
    """Generate one image for the selected feature tab.

    This endpoint is a plain ``def`` so the blocking remote call runs in the
    threadpool.

    Returns:
        Dictionary with ``success``, ``image_data_url`` and ``mime_type``.

    Raises:
        HTTPException: 400 when the prompt or a required input image is
            missing or unreadable; 502 with the generic localized message
            when the remote service fails.
    """
    blocker = generate_blocker(req.feature, req.prompt, bool(req.image1), bool(req.image2))
    if blocker:
        raise HTTPException(status_code=400, detail=blocker)

    try:
        image1 = image_input_from_data_url(req.image1) if req.image1 else None
        image2 = image_input_from_data_url(req.image2) if req.image2 else None
        for image in (image1, image2):
            if image is not None:
                decode_base64(image.base64)
    except InvalidImageError as e:
        raise HTTPException(status_code=400, detail=f"Invalid input image: {e}") from e

    language = req.language or config.default_language
    generation = GenerationRequest(
        feature=req.feature,
        prompt=req.prompt,
        style_prompt=presets.style_prompt(req.style, language) or None,
        aspect_ratio=req.aspect_ratio,
        image1=image1,
        image2=image2,
    )

    service: GeminiImageService = request.app.state.image_service
    try:
        result = service.generate(generation)
    except GenerationError as e:
        logger.error(f"Generation failed: {e}")
        raise HTTPException(status_code=502, detail=_text(language)["errorMessage"]) from e

    return {
        "success": True,
        "image_data_url": result.data_url,
        "mime_type": result.mime_type,
    }


@app.post("/api/upload")
async def upload_image(file: UploadFile = File(...)) -> dict:
    """Decode an uploaded file into an input image.

    Returns:
        Dictionary with ``base64``, ``mime_type`` and ``data_url``.

    Raises:
        HTTPException: 400 if the file is not a readable image.
    """
    data = await file.read()
    try:
        image = image_input_from_upload(data, file.content_type)
    except InvalidImageError as e:
        logger.warning(f"Rejected upload {file.filename}: {e}")
        raise HTTPException(status_code=400, detail=_text(None)["errorTitle"]) from e

    return {"base64": image.base64, "mime_type": image.mime_type, "data_url": image.data_url}


@app.post("/api/download")
async def download_image(req: ImageDataUrlRequest) -> Response:
    """Return a generated image as a file attachment.

    Raises:
        HTTPException: 400 if the data URL cannot be decoded.
    """
    try:
        mime_type, payload = split_data_url(req.image_data_url)
        data = decode_base64(payload)
    except InvalidImageError as e:
        raise HTTPException(status_code=400, detail=str(e)) from e

    return Response(
        content=data,
        media_type=mime_type,
        headers={"Content-Disposition": f'attachment; filename="{download_filename()}"'},
    )


# ---------------------------------------------------------------------------
# Library routes.
# ---------------------------------------------------------------------------


@app.get("/api/library")
async def get_library(request: Request) -> dict:
    """Return all saved images, newest first.

    Returns:
        Dictionary with ``total`` and ``images`` (library file records).
    """
    return _library_payload(request.app.state.library)


@app.post("/api/library")
async def save_image(req: SaveImageRequest, request: Request) -> dict:
    """Save a generated image to the library.

    Returns:
        Dictionary with ``success`` and the new ``image`` record.

    Raises:
        HTTPException: 400 for an empty prompt or image; 409 if this exact
            image is already saved; 507 if the library could not be stored
            (the image is still kept for this session).
    """
    library: Library = request.app.state.library
    if is_saved(library, req.image_data_url):
        raise HTTPException(status_code=409, detail=_text(req.language)["saved"])

    try:
        image = new_saved_image(req.image_data_url, req.prompt)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e)) from e

    store: LibraryStore = request.app.state.store
    try:
        request.app.state.library = store.add(library, image)
    except PersistenceError as e:
        raise _persistence_failed(request, e, req.language) from e

    return {"success": True, "image": request.app.state.library[0].to_record()}


@app.post("/api/library/saved")
async def check_saved(req: ImageDataUrlRequest, request: Request) -> dict:
    """Report whether this exact image data URL is already in the library."""
    return {"saved": is_saved(request.app.state.library, req.image_data_url)}


@app.get("/api/library/export")
async def export_library(request: Request) -> Response:
    """Download the whole library as a JSON file.

    Raises:
        HTTPException: 404 if the library is empty.
    """
    library: Library = request.app.state.library
    if not library:
        raise HTTPException(status_code=404, detail="Library is empty")

    store: LibraryStore = request.app.state.store
    return Response(
        content=store.export_all(library),
        media_type="application/json",
        headers={"Content-Disposition": f'attachment; filename="{EXPORT_FILENAME}"'},
    )


@app.post("/api/library/import")
async def import_library(
    request: Request, file: UploadFile = File(...), lang: str | None = None
) -> dict:
    """Merge an exported library file into the library.

    Returns:
        Dictionary with ``success``, ``added``, ``total`` and a localized
        ``message``.  ``added`` is zero when every entry was invalid or
        already present.

    Raises:
        HTTPException: 400 with the localized import error if the file is not
            a JSON array; 507 if the merged library could not be stored.
    """
    raw = await file.read()
    text = _text(lang)
    store: LibraryStore = request.app.state.store

    try:
        library, added = store.import_merge(request.app.state.library, raw)
    except ImportParseError as e:
        logger.warning(f"Import of {file.filename} failed: {e}")
        raise HTTPException(status_code=400, detail=text["importError"]) from e
    except PersistenceError as e:
        raise _persistence_failed(request, e, lang) from e

    request.app.state.library = library
    message = f"{text['importSuccess']} ({added})" if added else text["noNewImages"]
    return {"success": True, "added": added, "total": len(library), "message": message}


@app.get("/api/library/{image_id}/reuse")
async def reuse_image(
    image_id: str,
    request: Request,
    active_tab: FeatureKey = FeatureKey.TEXT_TO_PHOTO,
    has_image1: bool = False,
) -> dict:
    """Return a saved image as a generation input and where it should go.

    Args:
        image_id: Id of the saved image.
        active_tab: Tab the user is on.
        has_image1: Whether the first input slot is already filled.

    Returns:
        Dictionary with ``slot`` (1 or 2), ``active_tab`` and ``image``
        (``base64``, ``mime_type``, ``data_url``).

    Raises:
        HTTPException: 404 if the image is not in the library; 400 if its
            stored payload is not a data URL.
    """
    image = find(request.app.state.library, image_id)
    if image is None:
        raise HTTPException(status_code=404, detail="Image not found")

    try:
        reused = select_for_reuse(image)
    except InvalidImageError as e:
        raise HTTPException(status_code=400, detail=str(e)) from e

    slot, tab = reuse_target(active_tab, has_image1)
    return {
        "slot": slot,
        "active_tab": tab.value,
        "image": {
            "base64": reused.base64,
            "mime_type": reused.mime_type,
            "data_url": reused.data_url,
        },
    }


@app.delete("/api/library/{image_id}")
async def delete_image(image_id: str, request: Request, lang: str | None = None) -> dict:
    """Delete a saved image.  Deleting an unknown id is not an error.

    Returns:
        Dictionary with ``success``, ``deleted`` and ``removed`` (whether an
        entry was actually removed).

    Raises:
        HTTPException: 507 if the library could not be stored.
    """
    before: Library = request.app.state.library
    store: LibraryStore = request.app.state.store
    try:
        after = store.remove(before, image_id)
    except PersistenceError as e:
        raise _persistence_failed(request, e, lang) from e

    request.app.state.library = after
    return {"success": True, "deleted": image_id, "removed": len(after) != len(before)}


# ---------------------------------------------------------------------------
# CLI entry point.
# ---------------------------------------------------------------------------


def main() -> None:
    """Launch the uvicorn ASGI server.

    Reads host, port and log level from
    :data:`~photostudio.core.config.config` (``PHOTOSTUDIO_SERVER_HOST``,
    ``PHOTOSTUDIO_SERVER_PORT``, ``PHOTOSTUDIO_LOG_LEVEL``).

    This function is registered as the ``photostudio`` console script in
    ``pyproject.toml``.
    """
    import uvicorn

    logging.basicConfig(
        level=config.log_level.upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    uvicorn.run(
        "photostudio.api.main:app",
        host=config.server_host,
        port=config.server_port,
        reload=False,
    )


if __name__ == "__main__":
    main()
