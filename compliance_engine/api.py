"""
Submittal Compliance Engine - FastAPI REST API Server

HTTP endpoints for submitting a submittal/specification pair for analysis
"""

from datetime import datetime
from typing import Any, Dict, Optional

import uvicorn
from fastapi import FastAPI, HTTPException
from fastapi.middleware.cors import CORSMiddleware
from loguru import logger
from pydantic import BaseModel, Field, ValidationError

from compliance_engine import __version__
from compliance_engine.engine import AnalysisEngine, get_analysis_engine, resolve_config
from compliance_engine.error_handler import SchemaValidationError
from compliance_engine.schemas import AnalysisReport
from compliance_engine.utils import get_settings, setup_logger


# Pydantic models (Request/Response schemas)

class AnalyzeRequest(BaseModel):
    """Analysis request"""
    submittal_text: str = Field(..., description="Extracted plain text of the submittal")
    specification_text: str = Field(..., description="Extracted plain text of the specification")
    analysis_id: str = Field(..., min_length=1, description="Caller-supplied analysis id")
    file_name: Optional[str] = Field(None, description="Source file name, echoed in metadata")
    config: Optional[Dict[str, Any]] = Field(None, description="Per-request engine options")

    class Config:
        json_schema_extra = {
            "example": {
                "submittal_text": "FIRE RATING\nDoor assembly is rated 90 minutes per UL 10C.",
                "specification_text": "FIRE RATING\nDoors shall have 90 minute rating per UL 10C.",
                "analysis_id": "sub-0001",
                "config": {"strictMode": True}
            }
        }


class AnalyzeResponse(BaseModel):
    """Analysis response"""
    status: str
    sanitized: bool
    error: Optional[str] = None
    report: AnalysisReport


class HealthResponse(BaseModel):
    """Health check"""
    status: str
    version: str
    timestamp: datetime = Field(default_factory=datetime.now)


# FastAPI application

app = FastAPI(
    title="Submittal Compliance Engine API",
    description="Rule-based compliance analysis of construction submittals against specifications",
    version=__version__,
    docs_url="/docs",
    redoc_url="/redoc"
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# Global variables
engine: Optional[AnalysisEngine] = None
settings = get_settings()


@app.on_event("startup")
async def startup_event():
    """Application startup"""
    global engine

    setup_logger(settings.log_level)
    logger.info("🚀 Starting compliance API server...")
    engine = get_analysis_engine()


@app.on_event("shutdown")
async def shutdown_event():
    """Application shutdown"""
    logger.info("👋 Shutting down compliance API server...")


# ==================== ENDPOINTS ====================

@app.get("/health", response_model=HealthResponse)
async def health_check():
    """Health check - System status"""
    return HealthResponse(
        status="healthy" if engine else "starting",
        version=__version__,
    )


@app.post("/api/analyze", response_model=AnalyzeResponse)
def analyze_endpoint(request: AnalyzeRequest):
    """
    Analyze a submittal against its specification

    **Example usage:**
    ```json
    {
        "submittal_text": "FIRE RATING\\nDoor assembly is rated 90 minutes per UL 10C.",
        "specification_text": "FIRE RATING\\nDoors shall have 90 minute rating per UL 10C.",
        "analysis_id": "sub-0001"
    }
    ```
    """
    current = engine or get_analysis_engine()

    try:
        config = resolve_config(request.config, current.config)
    except ValidationError as e:
        raise HTTPException(status_code=422, detail=e.errors(include_url=False, include_context=False, include_input=False))

    logger.info(f"📥 API analysis request: {request.analysis_id}")

    try:
        outcome = current.analyze(
            request.submittal_text,
            request.specification_text,
            request.analysis_id,
            file_name=request.file_name,
            config=config,
        )
    except SchemaValidationError as e:
        logger.error(f"❌ Report validation error: {e}")
        raise HTTPException(status_code=500, detail=str(e))

    return AnalyzeResponse(
        status=outcome.status.value,
        sanitized=outcome.sanitized,
        error=outcome.error,
        report=outcome.report,
    )


# ==================== MAIN ====================

def start_server(host: Optional[str] = None, port: Optional[int] = None):
    """Start API server"""
    logger.info("=" * 60)
    logger.info("Submittal Compliance API Server")
    logger.info("=" * 60)

    uvicorn.run(
        "compliance_engine.api:app",
        host=host or settings.api_host,
        port=port or settings.api_port,
        log_level=settings.log_level.lower()
    )


if __name__ == "__main__":
    start_server()
