"""
CivicAI - FastAPI Backend
"""
from fastapi import FastAPI, Request, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from civicai import __version__
from civicai.config import get_settings
from civicai.exceptions import PipelineStageError, TicketStoreError
from civicai.middleware.logging_middleware import LoggingMiddleware
from civicai.models.schemas import ErrorResponse
from civicai.routes import health, reports, tickets
from civicai.utils.logger import get_logger

settings = get_settings()
logger = get_logger(__name__)

app = FastAPI(
    title="CivicAI",
    description="Civic issue reporting API with Gemini analysis pipeline and ticket lifecycle",
    version=__version__
)

# Middleware 순서 중요: 아래에서 위로 실행됨
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],  # 프로덕션에서는 제한 필요
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)
app.add_middleware(LoggingMiddleware)

app.include_router(tickets.router)
app.include_router(reports.router)
app.include_router(health.router)


@app.exception_handler(PipelineStageError)
async def pipeline_error_handler(request: Request, exc: PipelineStageError):
    """Draft/persona failures: the citizen retries manually"""
    logger.error(f"Pipeline failure on {request.url.path}: {exc}")
    body = ErrorResponse(
        error="pipeline_failed",
        message=str(exc),
        detail={"stage": exc.stage}
    )
    return JSONResponse(
        status_code=status.HTTP_502_BAD_GATEWAY,
        content=body.model_dump(mode="json")
    )


@app.exception_handler(TicketStoreError)
async def store_error_handler(request: Request, exc: TicketStoreError):
    logger.error(f"Ticket store failure on {request.url.path}: {exc}")
    body = ErrorResponse(error="store_unavailable", message=str(exc))
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content=body.model_dump(mode="json")
    )


@app.get("/")
async def root():
    return {"message": "CivicAI API", "version": __version__}


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host=settings.fastapi_host, port=settings.fastapi_port)
