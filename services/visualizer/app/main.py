"""FastAPI application for the diagram generation service."""

import logging
from contextlib import asynccontextmanager
from datetime import datetime, timezone
from typing import AsyncIterator, Literal, Optional

from fastapi import Depends, FastAPI, HTTPException
from fastapi.responses import JSONResponse, StreamingResponse
from pydantic import BaseModel, Field

from core.config import configure_logging
from core.generation import (
    AuthFailureError,
    DiagramGenerator,
    GenerationError,
    GenerationTimeoutError,
    RateLimitedError,
    get_generation_service,
)
from core.utils import cleanup_all_clients
from workflows.shared.llm_utils import AnthropicJudgmentClient, JudgmentClient
from workflows.visualize import (
    DocumentInput,
    ManualResult,
    NoDiagramsError,
    VisualizeConfig,
    generate_for_text,
    stream_visualization,
    to_ndjson,
)

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    configure_logging()
    yield
    await cleanup_all_clients()


app = FastAPI(
    title="Diagram Generation API",
    description="Plans, segments and generates diagrams for extracted documents",
    version="1.0.0",
    lifespan=lifespan,
)


# Dependencies
def get_judge() -> JudgmentClient:
    return AnthropicJudgmentClient()


def get_generator() -> DiagramGenerator:
    return get_generation_service()


def get_visualize_config() -> VisualizeConfig:
    return VisualizeConfig()


# Request/Response Models
class AnalyzeRequest(BaseModel):
    """Request to analyze a whole document."""

    document: DocumentInput


class GenerateRequest(BaseModel):
    """Request to generate diagrams for a selection."""

    text: str = Field(default="", description="Selected text")
    content_type: Literal["text", "code", "table"] = "text"
    context_before: Optional[str] = None
    context_after: Optional[str] = None


class GenerateResponse(BaseModel):
    results: list[ManualResult]
    count: int


class HealthResponse(BaseModel):
    status: str
    timestamp: str


# Endpoints
@app.get("/health", response_model=HealthResponse)
async def health_check() -> HealthResponse:
    """Liveness check."""
    return HealthResponse(
        status="ok", timestamp=datetime.now(timezone.utc).isoformat()
    )


@app.post("/analyze")
async def analyze(
    request: AnalyzeRequest,
    judge: JudgmentClient = Depends(get_judge),
    generator: DiagramGenerator = Depends(get_generator),
    config: VisualizeConfig = Depends(get_visualize_config),
) -> StreamingResponse:
    """Stream run events as newline-delimited JSON."""
    logger.info(
        f"Analyze request: '{request.document.title[:80]}' "
        f"({len(request.document.sections)} sections)"
    )

    async def body() -> AsyncIterator[str]:
        async for event in stream_visualization(
            request.document, judge=judge, generator=generator, config=config
        ):
            yield to_ndjson(event)

    return StreamingResponse(
        body(),
        media_type="application/x-ndjson",
        headers={"Cache-Control": "no-cache", "X-Accel-Buffering": "no"},
    )


@app.post("/generate", response_model=GenerateResponse)
async def generate(
    request: GenerateRequest,
    judge: JudgmentClient = Depends(get_judge),
    generator: DiagramGenerator = Depends(get_generator),
    config: VisualizeConfig = Depends(get_visualize_config),
):
    """Generate diagrams for a selection of text (manual mode)."""
    if not request.text.strip():
        raise HTTPException(status_code=400, detail="Text is required")

    try:
        results = await generate_for_text(
            request.text,
            content_type=request.content_type,
            context_before=request.context_before,
            context_after=request.context_after,
            judge=judge,
            generator=generator,
            config=config,
        )
    except RateLimitedError as e:
        return JSONResponse(
            status_code=429,
            content={"error": "Rate limit exceeded", "retry_after": e.retry_after},
        )
    except GenerationTimeoutError:
        raise HTTPException(
            status_code=504, detail="Diagram generation timed out, please try again"
        )
    except AuthFailureError:
        raise HTTPException(
            status_code=502, detail="Diagram service authentication failed"
        )
    except GenerationError as e:
        raise HTTPException(status_code=502, detail=f"Diagram service error: {e.message}")
    except NoDiagramsError as e:
        raise HTTPException(status_code=500, detail=e.message)

    return GenerateResponse(results=results, count=len(results))
