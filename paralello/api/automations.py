"""Active automation endpoints and job triggers."""

import logging
from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException
from fastapi.responses import JSONResponse
from pydantic import BaseModel
from sqlalchemy.orm import Session

from paralello.api.deps import get_llm_factory, get_relay_factory
from paralello.core.dispatch import process_automation
from paralello.core.scheduling import parse_time_of_day, validate_weekdays
from paralello.core.suggestions import run_suggestion_batch
from paralello.database import get_db
from paralello.models.automation import ActiveAutomation

logger = logging.getLogger(__name__)

router = APIRouter()


class AutomationCreate(BaseModel):
    """Automation create schema."""

    organization_id: int
    client_id: int
    name: str
    weekdays: List[int]
    time_of_day: str = "09:00"
    context_days: int = 7
    assigned_approver: Optional[int] = None
    custom_prompt: Optional[str] = None
    is_active: bool = True


class AutomationUpdate(BaseModel):
    """Automation update schema."""

    name: Optional[str] = None
    weekdays: Optional[List[int]] = None
    time_of_day: Optional[str] = None
    context_days: Optional[int] = None
    assigned_approver: Optional[int] = None
    custom_prompt: Optional[str] = None
    is_active: Optional[bool] = None


def _automation_dict(a: ActiveAutomation) -> dict:
    return {
        "id": a.id,
        "organization_id": a.organization_id,
        "client_id": a.client_id,
        "name": a.name,
        "weekdays": a.weekdays,
        "time_of_day": a.time_of_day,
        "context_days": a.context_days,
        "assigned_approver": a.assigned_approver,
        "custom_prompt": a.custom_prompt,
        "is_active": a.is_active,
    }


def _validate(data: dict) -> dict:
    if data.get("weekdays") is not None:
        data["weekdays"] = validate_weekdays(data["weekdays"])
    if data.get("time_of_day") is not None:
        data["time_of_day"] = parse_time_of_day(data["time_of_day"]).strftime("%H:%M")
    if data.get("context_days") is not None and data["context_days"] < 1:
        raise HTTPException(status_code=422, detail="context_days must be at least 1")
    return data


@router.get("/")
def list_automations(organization_id: Optional[int] = None, db: Session = Depends(get_db)):
    """List automations."""
    query = db.query(ActiveAutomation)
    if organization_id is not None:
        query = query.filter(ActiveAutomation.organization_id == organization_id)
    return [_automation_dict(a) for a in query.order_by(ActiveAutomation.id).all()]


@router.post("/")
def create_automation(data: AutomationCreate, db: Session = Depends(get_db)):
    """Create automation."""
    automation = ActiveAutomation(**_validate(data.dict()))
    db.add(automation)
    db.commit()
    db.refresh(automation)
    return _automation_dict(automation)


@router.put("/{automation_id}")
def update_automation(automation_id: int, data: AutomationUpdate, db: Session = Depends(get_db)):
    """Update automation."""
    automation = db.query(ActiveAutomation).filter(ActiveAutomation.id == automation_id).first()
    if not automation:
        raise HTTPException(status_code=404, detail="Automation not found")

    for key, value in _validate(data.dict(exclude_unset=True)).items():
        setattr(automation, key, value)
    db.commit()
    db.refresh(automation)
    return _automation_dict(automation)


@router.post("/generate-suggestions")
def trigger_suggestion_generation(db: Session = Depends(get_db), llm_factory=Depends(get_llm_factory)):
    """Run the suggestion batch for today."""
    try:
        logs = run_suggestion_batch(db, llm_factory)
    except Exception as e:
        logger.error(f"Suggestion batch failed: {e}", exc_info=True)
        return JSONResponse(status_code=500, content={"error": str(e)})
    return {"success": True, "logs": logs}


@router.post("/process")
def trigger_processing(db: Session = Depends(get_db), relay_factory=Depends(get_relay_factory)):
    """Send due dispatches, due reports and approved suggestions."""
    try:
        processed = process_automation(db, relay_factory())
    except Exception as e:
        logger.error(f"Automation processing failed: {e}", exc_info=True)
        return JSONResponse(status_code=500, content={"error": str(e)})
    return {"success": True, "processed": processed}
