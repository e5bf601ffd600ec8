import logging

from fastapi import FastAPI, HTTPException, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from live_tutor.api_models import ErrorResponse
from live_tutor.config import get_settings
from live_tutor.routers import lesson_ws, lessons

log = logging.getLogger(__name__)

settings = get_settings()

app = FastAPI(
    title="Live Tutor API",
    description="Lesson progression and tool-call dispatch for agent-guided tutorials.",
    version="0.1.0",
)

# --- CORS Configuration ---
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# --- Mount Routers ---
app.include_router(lessons.router, prefix="/api/v1")
app.include_router(lesson_ws.router, prefix="/api/v1")


@app.get("/", tags=["Root"])
async def read_root():
    return {"message": "Welcome to the Live Tutor API!"}


# Global exception handlers to return JSON ErrorResponse
@app.exception_handler(HTTPException)
async def http_exception_handler(request: Request, exc: HTTPException):
    err = ErrorResponse(message=str(exc.detail), error_code=f"HTTP_{exc.status_code}")
    return JSONResponse(status_code=exc.status_code, content=err.model_dump())


@app.exception_handler(Exception)
async def generic_exception_handler(request: Request, exc: Exception):
    log.error(f"Unhandled exception on {request.url.path}: {exc}", exc_info=True)
    err = ErrorResponse(message="Internal server error")
    return JSONResponse(status_code=500, content=err.model_dump())

# To run the API: uvicorn live_tutor.api:app --reload
