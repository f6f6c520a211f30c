"""FastAPI server exposing the closet catalog and outfit endpoints."""

from functools import lru_cache
from typing import Optional

from fastapi import Depends, FastAPI, File, Form, Header, HTTPException, UploadFile
from fastapi.responses import FileResponse
from pydantic import BaseModel

from agents.saved_outfits import OutfitValidationError
from closet_app.app import ClosetApp
from closet_app.logging_config import configure_logging
from logic.validation import ClothingUpdateRequest, OutfitPromptRequest, SaveOutfitRequest
from memory.user_profile import UserContext
from models.taxonomy import validate_section
from tools.image_storage import ImageUploadError, LocalImageStorage

configure_logging()

app = FastAPI(title="Smart Closet", version="0.1.0")

_ERROR_STATUS = {
    "validation": 400,
    "plan": 403,
    "storage": 503,
    "transport": 502,
    "malformed_response": 502,
    "processing": 422,
}


class SavedStatus(BaseModel):
    saved: bool
    outfit_id: Optional[str] = None


@lru_cache(maxsize=1)
def get_closet_app() -> ClosetApp:
    """Build the process-wide ClosetApp on first use."""

    return ClosetApp()


def get_user_context(
    x_user_id: Optional[str] = Header(None),
    closet: ClosetApp = Depends(get_closet_app),
) -> UserContext:
    if not x_user_id:
        raise HTTPException(status_code=401, detail="Missing X-User-Id header")
    context = closet.context_for(x_user_id)
    if context is None:
        raise HTTPException(status_code=401, detail="Unknown user")
    return context


def _raise_for_error(response: dict) -> dict:
    if response.get("status") != "ok":
        status_code = _ERROR_STATUS.get(response.get("reason", ""), 400)
        raise HTTPException(status_code=status_code, detail=response)
    return response


@app.get("/healthz")
async def healthcheck(closet: ClosetApp = Depends(get_closet_app)) -> dict:
    """Lightweight readiness probe."""

    return {
        "status": "ok",
        "service": "smart-closet",
        "environment": closet.config.environment or "local",
        "model": closet.config.model,
    }


@app.get("/images/{path:path}")
def serve_image(path: str, closet: ClosetApp = Depends(get_closet_app)) -> FileResponse:
    """Serve processed photos for the local storage backend."""

    storage = closet.image_storage
    if not isinstance(storage, LocalImageStorage):
        raise HTTPException(status_code=404, detail="Image not found")
    try:
        target = storage.local_path(path)
    except ImageUploadError as exc:
        raise HTTPException(status_code=404, detail="Image not found") from exc
    if not target.is_file():
        raise HTTPException(status_code=404, detail="Image not found")
    return FileResponse(target, media_type="image/png")


@app.get("/me")
def read_profile(context: UserContext = Depends(get_user_context)) -> dict:
    profile = context.profile
    return {
        "user_id": context.user_id,
        "name": profile.name,
        "last_name": profile.last_name,
        "plan": profile.plan,
        "email": profile.email,
        "outfit_mode": context.outfit_mode,
    }


@app.get("/clothes")
def list_clothes(
    section: Optional[str] = None,
    context: UserContext = Depends(get_user_context),
    closet: ClosetApp = Depends(get_closet_app),
) -> list:
    if section:
        try:
            section = validate_section(section)
        except ValueError as exc:
            raise HTTPException(status_code=400, detail=str(exc)) from exc
    return closet.wardrobe_tools.list_clothing_items(context.user_id, section=section)


@app.post("/clothes", status_code=201)
def add_clothes(
    image: Optional[UploadFile] = File(None),
    section: str = Form(""),
    name: str = Form(""),
    type: str = Form(""),
    color: str = Form(""),
    style: str = Form(""),
    context: UserContext = Depends(get_user_context),
    closet: ClosetApp = Depends(get_closet_app),
) -> dict:
    """Upload a clothing photo with its details and add it to the catalog."""

    image_bytes = image.file.read() if image is not None else None
    response = closet.add_clothing(
        context,
        image_bytes=image_bytes,
        filename=image.filename if image is not None else None,
        metadata={"section": section, "name": name, "type": type, "color": color, "style": style},
    )
    return _raise_for_error(response)


@app.patch("/clothes/{item_id}")
def update_clothes(
    item_id: str,
    request: ClothingUpdateRequest,
    context: UserContext = Depends(get_user_context),
    closet: ClosetApp = Depends(get_closet_app),
) -> dict:
    updated = closet.wardrobe_tools.update_clothing_item(
        context.user_id, item_id, request.model_dump(exclude_none=True)
    )
    if updated is None:
        raise HTTPException(status_code=404, detail="Clothing item not found")
    return updated


@app.delete("/clothes/{item_id}", status_code=204)
def delete_clothes(
    item_id: str,
    context: UserContext = Depends(get_user_context),
    closet: ClosetApp = Depends(get_closet_app),
) -> None:
    if not closet.wardrobe_tools.delete_clothing_item(context.user_id, item_id):
        raise HTTPException(status_code=404, detail="Clothing item not found")


@app.post("/outfits/random")
def random_outfit(
    context: UserContext = Depends(get_user_context),
    closet: ClosetApp = Depends(get_closet_app),
) -> dict:
    return _raise_for_error(closet.random_outfit(context))


@app.post("/outfits/ai")
def ai_outfit(
    request: OutfitPromptRequest,
    context: UserContext = Depends(get_user_context),
    closet: ClosetApp = Depends(get_closet_app),
) -> dict:
    previous = request.previous.model_dump() if request.previous else None
    return _raise_for_error(closet.ai_outfit(context, request.prompt, previous=previous))


@app.get("/outfits/saved/status", response_model=SavedStatus)
def saved_status(
    top_id: str,
    bottom_id: str,
    shoes_id: str,
    context: UserContext = Depends(get_user_context),
    closet: ClosetApp = Depends(get_closet_app),
) -> SavedStatus:
    existing = closet.saved_outfits.is_saved(context, top_id, bottom_id, shoes_id)
    return SavedStatus(saved=existing is not None, outfit_id=existing.outfit_id if existing else None)


@app.post("/outfits/saved/toggle")
def toggle_saved_outfit(
    request: SaveOutfitRequest,
    context: UserContext = Depends(get_user_context),
    closet: ClosetApp = Depends(get_closet_app),
) -> dict:
    try:
        return closet.toggle_saved_outfit(context, request.top_id, request.bottom_id, request.shoes_id)
    except OutfitValidationError as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc


@app.get("/outfits/saved")
def list_saved_outfits(
    context: UserContext = Depends(get_user_context),
    closet: ClosetApp = Depends(get_closet_app),
) -> list:
    return closet.saved_outfits.list_saved(context)


@app.delete("/outfits/saved/{outfit_id}", status_code=204)
def delete_saved_outfit(
    outfit_id: str,
    context: UserContext = Depends(get_user_context),
    closet: ClosetApp = Depends(get_closet_app),
) -> None:
    if not closet.saved_outfits.delete_saved(context, outfit_id):
        raise HTTPException(status_code=404, detail="Saved outfit not found")


def get_app() -> FastAPI:
    """Expose the FastAPI instance for ASGI servers."""

    return app


if __name__ == "__main__":
    import uvicorn

    uvicorn.run("server.api:app", host="0.0.0.0", port=8080, reload=False)
