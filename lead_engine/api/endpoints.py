"""
FastAPI Endpoints for the Lead Intelligence Engine
==================================================
Recruiter-facing API for lead scoring, pipeline views and recruitment
analytics.

Base URL: http://localhost:8000

Endpoints:
- GET  /                                  - API info
- GET  /api/health                        - Health check
- GET  /api/recruiter/lead-scoring        - Scoring rules and tiers
- POST /api/recruiter/lead-scoring        - calculate / update_scores / recalculate_all / get_recommendations
- GET  /api/recruiter/pipeline-stages     - Pipeline snapshot
- POST /api/recruiter/pipeline-stages     - move_leads / get_stage_leads / get_stuck_leads
- GET  /api/recruiter/recruiter-stats     - Recruiter performance for a period
- GET  /api/recruiter/recruitment-insights - Cohort analytics and key insights
- POST /api/score/quick                   - Score a raw lead with both strategies
- GET  /api/geolocate                     - Country for a phone number
- GET  /api/stats                         - Engine statistics

Recruiter endpoints require the caller role in the X-User-Role header
(recruiter or admin).
"""

import logging
from datetime import datetime, timezone
from fastapi import FastAPI, Depends, Query, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from pydantic import BaseModel, Field, field_validator
from typing import Optional, Dict, Any, List
from dotenv import load_dotenv

# Load environment variables
load_dotenv()

from ..auth import AppRole, check_role, require_role
from ..config.settings import ENGINE_CONFIG, AUTH_CONFIG
from ..engine import LeadIntelligenceEngine
from ..errors import LeadEngineError, ValidationError
from ..logging_config import configure_logging
from ..models.schemas import phone_text
from ..stages.stage1_geolocation import detect_country_from_phone, normalize_phone
from ..store import InMemoryLeadStore

configure_logging()
logger = logging.getLogger(__name__)


# =============================================================================
# FastAPI App Initialization
# =============================================================================

app = FastAPI(
    title="Lead Intelligence Engine API",
    description="""
## Lead Scoring & Recruitment Analytics

Scores prospective students and reports on the recruitment funnel.

### Features:
- **Two scoring strategies**: field-quality composite and rule-based tiers
- **Pipeline**: stage counts, stuck leads, bulk stage moves
- **Analytics**: country / method / outcome / source / readiness / intake cohorts
- **Insights**: ranked natural-language findings

### Quick Start:
1. Use `/api/score/quick` to score a raw lead record
2. Use `/api/recruiter/lead-scoring` with `action: calculate` to score stored leads
3. Use `/api/recruiter/recruitment-insights` for the cohort report
    """,
    version=ENGINE_CONFIG["version"],
    docs_url="/docs",
    redoc_url="/redoc",
)

# CORS middleware - Allow all origins for frontend development
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# =============================================================================
# Store & Engine Initialization
# =============================================================================

# In-memory store (replace with a database-backed LeadStore in production)
default_store = InMemoryLeadStore()


def get_default_engine() -> LeadIntelligenceEngine:
    return LeadIntelligenceEngine(store=default_store)


default_engine = get_default_engine()


def get_engine() -> LeadIntelligenceEngine:
    """Engine dependency; tests swap it through app.dependency_overrides."""
    return default_engine


def require_recruiter(request: Request) -> AppRole:
    """Role guard run before any engine call on recruiter endpoints."""
    role = request.headers.get(AUTH_CONFIG["role_header"])
    return require_role(check_role(role, AppRole(AUTH_CONFIG["required_role"])))


# =============================================================================
# Request Models
# =============================================================================

class LeadScoringRequest(BaseModel):
    """Body for POST /api/recruiter/lead-scoring"""
    action: str = Field(..., description="calculate, update_scores, recalculate_all or get_recommendations")
    lead_ids: Optional[List[str]] = Field(None, alias="leadIds")
    strategy: str = Field("rules", description="Scoring strategy: rules or composite")

    class Config:
        populate_by_name = True
        json_schema_extra = {
            "example": {"action": "calculate", "leadIds": ["lead-1", "lead-2"]}
        }


class PipelineActionRequest(BaseModel):
    """Body for POST /api/recruiter/pipeline-stages"""
    action: str = Field(..., description="move_leads, get_stage_leads or get_stuck_leads")
    lead_ids: Optional[List[str]] = Field(None, alias="leadIds")
    target_stage: Optional[str] = Field(None, alias="targetStage")
    notes: Optional[str] = None
    stage_id: Optional[str] = Field(None, alias="stageId")
    limit: int = 50
    offset: int = 0
    threshold_days: int = Field(7, alias="thresholdDays")

    class Config:
        populate_by_name = True


class QuickScoreRequest(BaseModel):
    """Raw lead fields for stateless scoring"""
    id: Optional[str] = Field(None, description="Optional lead id echoed back")
    prospect_name: Optional[str] = Field(None, description="Full name")
    prospect_email: Optional[str] = Field(None, description="Email address")
    phone: Optional[str] = Field(None, description="Phone number in any format")
    intake: Optional[str] = Field(None, description="Intended intake, e.g. 'October 2026'")
    barcelona_timeline: Optional[int] = Field(None, description="Months until planned move")
    contact_status: Optional[str] = Field(None, description="Pipeline stage")
    referral_source: Optional[str] = None
    lead_score: Optional[int] = Field(None, description="Previously stored score")
    created_at: Optional[datetime] = None
    last_contact_date: Optional[datetime] = None

    class Config:
        json_schema_extra = {
            "example": {
                "prospect_name": "Maria Garcia",
                "prospect_email": "maria.garcia@example.com",
                "phone": "+1 809 555 1234",
                "intake": "October 2026",
                "barcelona_timeline": 4,
            }
        }

    @field_validator("phone", mode="before")
    @classmethod
    def _phone_as_text(cls, value):
        return phone_text(value)


def _ok(data: Any) -> Dict[str, Any]:
    return {"success": True, "data": data}


# =============================================================================
# Info Endpoints
# =============================================================================

@app.get("/", tags=["Info"])
async def root():
    """API information"""
    return {
        "name": ENGINE_CONFIG["service_name"],
        "version": ENGINE_CONFIG["version"],
        "docs": "/docs",
        "endpoints": {
            "lead_scoring": "/api/recruiter/lead-scoring",
            "pipeline": "/api/recruiter/pipeline-stages",
            "recruiter_stats": "/api/recruiter/recruiter-stats",
            "recruitment_insights": "/api/recruiter/recruitment-insights",
            "quick_score": "/api/score/quick",
            "geolocate": "/api/geolocate",
        },
    }


@app.get("/api/health", tags=["Info"])
async def health_check():
    """Health check endpoint"""
    return {
        "status": "healthy",
        "version": ENGINE_CONFIG["version"],
        "timestamp": datetime.now(timezone.utc).isoformat(),
    }


@app.get("/api/stats", tags=["Info"], dependencies=[Depends(require_recruiter)])
async def get_stats(engine: LeadIntelligenceEngine = Depends(get_engine)):
    """Engine statistics"""
    return _ok(engine.get_stats())


# =============================================================================
# Lead Scoring
# =============================================================================

@app.get("/api/recruiter/lead-scoring", tags=["Scoring"], dependencies=[Depends(require_recruiter)])
def list_scoring_rules(engine: LeadIntelligenceEngine = Depends(get_engine)):
    return _ok(engine.list_scoring_rules())


@app.post("/api/recruiter/lead-scoring", tags=["Scoring"], dependencies=[Depends(require_recruiter)])
def lead_scoring_action(
    request: LeadScoringRequest,
    engine: LeadIntelligenceEngine = Depends(get_engine),
):
    """
    Run a scoring action.

    - calculate: score leads (leadIds optional) without writing
    - update_scores: score leadIds and write scores back
    - recalculate_all: rescore and write back every lead
    - get_recommendations: prioritised follow-ups for leadIds
    """
    if request.action == "calculate":
        return _ok(engine.calculate(request.lead_ids, request.strategy))
    if request.action == "update_scores":
        return _ok(engine.update_scores(request.lead_ids, request.strategy))
    if request.action == "recalculate_all":
        return _ok(engine.recalculate_all(request.strategy))
    if request.action == "get_recommendations":
        return _ok({"recommendations": engine.get_recommendations(request.lead_ids)})
    raise ValidationError("Invalid action")


@app.post("/api/score/quick", tags=["Scoring"], dependencies=[Depends(require_recruiter)])
def quick_score(
    request: QuickScoreRequest,
    engine: LeadIntelligenceEngine = Depends(get_engine),
):
    """Score a raw lead record with both strategies; nothing is stored."""
    record = request.model_dump(exclude_none=True)
    return _ok({
        name: engine.score_record(record, name)
        for name in engine.strategies
    })


@app.get("/api/geolocate", tags=["Scoring"])
async def geolocate(phone: str = Query(..., description="Phone number in any format")):
    return _ok({
        "phone": phone,
        "digits": normalize_phone(phone),
        "country": detect_country_from_phone(phone),
    })


# =============================================================================
# Pipeline
# =============================================================================

@app.get("/api/recruiter/pipeline-stages", tags=["Pipeline"], dependencies=[Depends(require_recruiter)])
def pipeline_stages(
    metrics: bool = Query(False, description="Include per-stage metrics"),
    country: Optional[str] = Query(None, description="Filter by country ('all' for none)"),
    engine: LeadIntelligenceEngine = Depends(get_engine),
):
    return _ok(engine.pipeline_snapshot(include_metrics=metrics, country=country))


@app.post("/api/recruiter/pipeline-stages", tags=["Pipeline"], dependencies=[Depends(require_recruiter)])
def pipeline_action(
    request: PipelineActionRequest,
    engine: LeadIntelligenceEngine = Depends(get_engine),
):
    if request.action == "move_leads":
        return _ok(engine.move_leads(request.lead_ids, request.target_stage, request.notes))
    if request.action == "get_stage_leads":
        return _ok(engine.get_stage_leads(request.stage_id, request.limit, request.offset))
    if request.action == "get_stuck_leads":
        return _ok(engine.get_stuck_leads(request.threshold_days))
    raise ValidationError("Invalid action")


# =============================================================================
# Reporting
# =============================================================================

@app.get("/api/recruiter/recruiter-stats", tags=["Reporting"], dependencies=[Depends(require_recruiter)])
def recruiter_stats(
    period: str = Query("month", description="day, week, month or quarter"),
    engine: LeadIntelligenceEngine = Depends(get_engine),
):
    return _ok(engine.recruiter_performance(period))


@app.get("/api/recruiter/recruitment-insights", tags=["Reporting"], dependencies=[Depends(require_recruiter)])
def recruitment_insights(
    period: str = Query("all", description="day, week, month, quarter or all"),
    engine: LeadIntelligenceEngine = Depends(get_engine),
):
    return _ok(engine.recruitment_insights(period))


# =============================================================================
# Error Handlers
# =============================================================================

@app.exception_handler(LeadEngineError)
async def lead_engine_exception_handler(request: Request, exc: LeadEngineError):
    if exc.status_code >= 500:
        logger.error("%s %s failed: %s", request.method, request.url.path, exc.message)
    return JSONResponse(status_code=exc.status_code, content=exc.to_dict())


@app.exception_handler(RequestValidationError)
async def request_validation_exception_handler(request: Request, exc: RequestValidationError):
    error = ValidationError("Invalid request", details={"errors": exc.errors()})
    return JSONResponse(status_code=error.status_code, content=jsonable_encoder(error.to_dict()))


@app.exception_handler(Exception)
async def global_exception_handler(request, exc):
    logger.exception("Unhandled error on %s %s", request.method, request.url.path)
    return JSONResponse(
        status_code=500,
        content={
            "success": False,
            "error": "Internal server error",
            "detail": str(exc),
            "type": type(exc).__name__,
        }
    )
