"""
FastAPI HTTP server for the card designer.
Exposes one in-memory design session over HTTP.

Usage:
    uvicorn card_designer.api:app --port 8080
"""

import logging
import shutil
import tempfile
from pathlib import Path
from typing import Optional

from fastapi import BackgroundTasks, FastAPI, HTTPException
from fastapi.responses import FileResponse, HTMLResponse, PlainTextResponse
from pydantic import BaseModel

from .errors import ExportError, describe_error
from .prompt_manager import AUTO_STYLE, STYLE_VOCABULARY
from .workflow import WorkflowController

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
)
logger = logging.getLogger(__name__)


# Request models

class AnalyzeRequest(BaseModel):
    text: str
    style: str = AUTO_STYLE


def create_app(controller: Optional[WorkflowController] = None) -> FastAPI:
    """
    Build the API around a single workflow session.

    Args:
        controller: Session controller (a default one is created if None)
    """
    session = controller or WorkflowController()

    app = FastAPI(
        title="Knowledge Card Designer API",
        description="Two-stage LLM pipeline turning text into knowledge cards",
        version="1.0.0"
    )
    app.state.session = session

    def require_card():
        if session.current_card is None:
            raise HTTPException(status_code=404, detail="No card has been generated yet")
        return session.current_card

    @app.get("/health")
    async def health_check():
        """Health check endpoint."""
        return {"status": "healthy", "service": "card-designer"}

    @app.get("/styles")
    async def list_styles():
        """Style choices; "Auto" lets the model pick."""
        return {"auto": AUTO_STYLE, "styles": STYLE_VOCABULARY}

    @app.get("/session")
    async def get_session():
        return session.snapshot()

    @app.post("/analyze")
    async def analyze_endpoint(request: AnalyzeRequest):
        """
        Build a blueprint from text. Failures are reported in the
        session's error field, not as HTTP errors.
        """
        logger.info(f"analyze: {len(request.text)} chars, style={request.style}")
        await session.analyze(request.text, request.style)
        return session.snapshot()

    @app.post("/cards/{index}")
    async def generate_card_endpoint(index: int):
        logger.info(f"generate_card: index={index}")
        try:
            await session.generate_card(index)
        except IndexError as e:
            raise HTTPException(status_code=404, detail=str(e))
        return session.snapshot()

    @app.post("/next")
    async def next_card_endpoint():
        await session.next_card()
        return session.snapshot()

    @app.post("/reset")
    async def reset_endpoint():
        session.reset()
        return session.snapshot()

    @app.get("/card", response_class=HTMLResponse)
    async def card_html():
        """Current card as an HTML document (700x1160)."""
        return HTMLResponse(require_card().html)

    @app.get("/card/markup", response_class=PlainTextResponse)
    async def card_markup():
        """Raw markup as plain text, for copying."""
        require_card()
        return PlainTextResponse(session.copy_markup())

    @app.get("/card/image")
    async def card_image(background_tasks: BackgroundTasks):
        """
        Export the current card to PNG (2x pixel density).

        The PNG lives in a per-request temp directory that is removed once
        the response has been sent.
        """
        card = require_card()
        output_dir = Path(tempfile.mkdtemp(prefix="card-export-"))
        try:
            path = await session.export_image(output_dir)
        except ExportError as e:
            shutil.rmtree(output_dir, ignore_errors=True)
            logger.error(f"Error in card export: {e}", exc_info=True)
            raise HTTPException(status_code=500, detail=describe_error(e))
        if path is None:
            shutil.rmtree(output_dir, ignore_errors=True)
            raise HTTPException(status_code=409, detail="An export is already running")
        background_tasks.add_task(shutil.rmtree, output_dir, ignore_errors=True)
        return FileResponse(path, media_type="image/png", filename=card.download_name)

    return app


app = create_app()
