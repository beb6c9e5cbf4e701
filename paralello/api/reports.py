"""Scheduled report endpoints."""

from datetime import datetime
from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel, field_serializer
from sqlalchemy.orm import Session

from paralello.core.scheduling import Cadence, CadenceKind, compute_next_run, utc_naive
from paralello.core.suggestions import local_now
from paralello.database import get_db
from paralello.models.report import ReportExecution, ScheduledReport

router = APIRouter()

CADENCE_FIELDS = {"frequency", "weekday", "day_of_month", "time_of_day"}


class ReportCreate(BaseModel):
    """Report create schema."""

    organization_id: int
    client_id: int
    name: str
    frequency: CadenceKind
    weekday: Optional[int] = None
    day_of_month: Optional[int] = None
    time_of_day: str
    metrics: List[str] = []
    template: str = ""
    is_active: bool = True
    created_by: Optional[int] = None


class ReportUpdate(BaseModel):
    """Report update schema."""

    name: Optional[str] = None
    frequency: Optional[CadenceKind] = None
    weekday: Optional[int] = None
    day_of_month: Optional[int] = None
    time_of_day: Optional[str] = None
    metrics: Optional[List[str]] = None
    template: Optional[str] = None
    is_active: Optional[bool] = None


class ReportResponse(BaseModel):
    """Report response schema."""

    id: int
    organization_id: int
    client_id: int
    name: str
    frequency: CadenceKind
    weekday: Optional[int] = None
    day_of_month: Optional[int] = None
    time_of_day: str
    metrics: List[str]
    template: Optional[str] = None
    is_active: bool
    next_run: Optional[datetime] = None
    last_run: Optional[datetime] = None

    @field_serializer("next_run", "last_run")
    def serialize_datetime(self, dt: Optional[datetime], _info) -> Optional[str]:
        """Serialize naive UTC datetime to ISO format string."""
        return dt.isoformat() + "Z" if dt else None

    class Config:
        from_attributes = True


def _apply_cadence(report: ScheduledReport) -> None:
    """Validate the cadence columns and recompute ``next_run``."""
    cadence = Cadence.from_report(report)
    report.time_of_day = cadence.time_of_day.strftime("%H:%M")
    report.next_run = utc_naive(compute_next_run(cadence, local_now()))


def _get_report(db: Session, report_id: int) -> ScheduledReport:
    report = db.query(ScheduledReport).filter(ScheduledReport.id == report_id).first()
    if not report:
        raise HTTPException(status_code=404, detail="Report not found")
    return report


@router.get("/", response_model=List[ReportResponse])
def list_reports(
    organization_id: Optional[int] = None,
    client_id: Optional[int] = None,
    include_inactive: bool = False,
    db: Session = Depends(get_db),
):
    """List scheduled reports."""
    query = db.query(ScheduledReport)
    if organization_id is not None:
        query = query.filter(ScheduledReport.organization_id == organization_id)
    if client_id is not None:
        query = query.filter(ScheduledReport.client_id == client_id)
    if not include_inactive:
        query = query.filter(ScheduledReport.is_active == True)  # noqa: E712
    return query.order_by(ScheduledReport.next_run.asc()).all()


@router.get("/{report_id}", response_model=ReportResponse)
def get_report(report_id: int, db: Session = Depends(get_db)):
    """Get report by ID."""
    return _get_report(db, report_id)


@router.post("/", response_model=ReportResponse)
def create_report(report_data: ReportCreate, db: Session = Depends(get_db)):
    """Create scheduled report."""
    report = ScheduledReport(**report_data.dict())
    _apply_cadence(report)
    db.add(report)
    db.commit()
    db.refresh(report)
    return report


@router.put("/{report_id}", response_model=ReportResponse)
def update_report(report_id: int, report_data: ReportUpdate, db: Session = Depends(get_db)):
    """Update scheduled report; cadence edits recompute the next run."""
    report = _get_report(db, report_id)
    update_data = report_data.dict(exclude_unset=True)
    for key, value in update_data.items():
        setattr(report, key, value)

    if update_data.get("frequency") is not None:
        # Fields of the previous frequency are dropped unless sent again
        frequency = CadenceKind(report.frequency)
        if frequency != CadenceKind.WEEKLY and "weekday" not in update_data:
            report.weekday = None
        if frequency != CadenceKind.MONTHLY and "day_of_month" not in update_data:
            report.day_of_month = None

    if CADENCE_FIELDS & update_data.keys():
        _apply_cadence(report)

    db.commit()
    db.refresh(report)
    return report


@router.delete("/{report_id}")
def deactivate_report(report_id: int, db: Session = Depends(get_db)):
    """Soft-disable a report; its execution history is kept."""
    report = _get_report(db, report_id)
    report.is_active = False
    db.commit()
    return {"message": "Report deactivated"}


@router.get("/{report_id}/executions")
def list_executions(report_id: int, limit: int = 50, db: Session = Depends(get_db)):
    """Execution history of a report."""
    _get_report(db, report_id)
    executions = (
        db.query(ReportExecution)
        .filter(ReportExecution.report_id == report_id)
        .order_by(ReportExecution.executed_at.desc())
        .limit(limit)
        .all()
    )
    return [
        {
            "id": e.id,
            "status": e.status.value,
            "message_sent": e.message_sent,
            "metrics_snapshot": e.metrics_snapshot,
            "error_message": e.error_message,
            "executed_at": e.executed_at.isoformat(),
        }
        for e in executions
    ]
