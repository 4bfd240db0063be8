from pathlib import Path

from fastapi import APIRouter
from fastapi.responses import HTMLResponse

STATIC_DIR = Path(__file__).resolve().parent.parent / "static"

router = APIRouter()


@router.get("/", response_class=HTMLResponse, include_in_schema=False)
def index():
    """Landing page hosting the booking wizard (driven by /static/app.js)."""
    return HTMLResponse((STATIC_DIR / "index.html").read_text(encoding="utf-8"))
