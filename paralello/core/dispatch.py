"""Send pipeline for scheduled messages, scheduled reports and approved suggestions."""

import logging
from datetime import datetime, timezone, tzinfo
from typing import List, Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, joinedload

from paralello.core.errors import ExternalServiceError
from paralello.core.reporting import build_report_message, collect_metrics, report_period
from paralello.core.scheduling import Cadence, compute_next_run, utc_naive
from paralello.core.suggestions import local_now
from paralello.models.automation import ActiveSuggestion, SuggestionStatus
from paralello.models.dispatch import DispatchStatus, ScheduledMessage
from paralello.models.report import ExecutionStatus, ReportExecution, ScheduledReport
from paralello.providers.base import MessageRelay

logger = logging.getLogger(__name__)


def _target(client) -> str:
    target = client.whatsapp_target if client else None
    if not target:
        raise ExternalServiceError("Client has no WhatsApp number or Group ID")
    return target


def process_scheduled_messages(db: Session, relay: MessageRelay, now_utc: datetime, logs: List[str]) -> None:
    """Relay pending dispatches that are due; each ends as sent or failed."""
    messages = (
        db.query(ScheduledMessage)
        .options(joinedload(ScheduledMessage.client))
        .filter(
            ScheduledMessage.status == DispatchStatus.PENDING,
            ScheduledMessage.scheduled_at <= utc_naive(now_utc),
        )
        .order_by(ScheduledMessage.scheduled_at)
        .all()
    )
    for msg in messages:
        message_id = msg.id
        client_name = msg.client.name if msg.client else "unknown"
        try:
            relay.dispatch(
                "message",
                {
                    "message_id": message_id,
                    "client_id": msg.client_id,
                    "organization_id": msg.organization_id,
                    "client_name": client_name,
                    "target_number": _target(msg.client),
                    "content": msg.message,
                    "category": msg.category.value,
                    "scheduled_at": msg.scheduled_at.isoformat(),
                },
            )
            msg.status = DispatchStatus.SENT
            msg.sent_at = datetime.utcnow()
            db.commit()
            logs.append(f"Message sent for {client_name}")
        except Exception as e:
            db.rollback()
            logger.error(f"Failed to send scheduled message {message_id}: {e}")
            logs.append(f"Failed to send message for {client_name}: {e}")
            try:
                msg.status = DispatchStatus.FAILED
                db.commit()
            except SQLAlchemyError as commit_error:
                db.rollback()
                logger.error(f"Could not mark scheduled message {message_id} as failed: {commit_error}")


def process_scheduled_reports(
    db: Session,
    relay: MessageRelay,
    now_utc: datetime,
    zone: tzinfo,
    logs: List[str],
) -> None:
    """Render and relay due reports, then move ``next_run`` forward."""
    reports = (
        db.query(ScheduledReport)
        .options(joinedload(ScheduledReport.client))
        .filter(
            ScheduledReport.is_active == True,  # noqa: E712
            ScheduledReport.next_run <= utc_naive(now_utc),
        )
        .order_by(ScheduledReport.next_run)
        .all()
    )
    today = now_utc.astimezone(zone).date()

    for report in reports:
        report_id = report.id
        client_name = report.client.name if report.client else "unknown"
        try:
            cadence = Cadence.from_report(report)
            start, end, period_text = report_period(cadence.kind, today)
            metrics = collect_metrics(db, report.client_id, start, end)
            content = build_report_message(report, metrics, period_text)

            relay.dispatch(
                "report",
                {
                    "report_id": report.id,
                    "client_id": report.client_id,
                    "organization_id": report.organization_id,
                    "client_name": client_name,
                    "target_number": _target(report.client),
                    "content": content,
                    "metrics": metrics.snapshot(),
                    "period": period_text,
                },
            )

            report.last_run = utc_naive(now_utc)
            report.next_run = utc_naive(compute_next_run(cadence, now_utc, tz=zone))
            db.add(
                ReportExecution(
                    report_id=report.id,
                    status=ExecutionStatus.SUCCESS,
                    message_sent=content,
                    metrics_snapshot=metrics.snapshot(),
                )
            )
            db.commit()
            logs.append(f"Report sent for {client_name}")
        except Exception as e:
            db.rollback()
            logger.error(f"Report failed for {report_id}: {e}")
            logs.append(f"Report failed for {client_name}: {e}")
            try:
                db.add(ReportExecution(report_id=report_id, status=ExecutionStatus.FAILED, error_message=str(e)))
                db.commit()
            except SQLAlchemyError as commit_error:
                db.rollback()
                logger.error(f"Could not record failed execution of report {report_id}: {commit_error}")


def process_approved_suggestions(db: Session, relay: MessageRelay, logs: List[str]) -> None:
    """Relay approved suggestions that have not been delivered yet."""
    suggestions = (
        db.query(ActiveSuggestion)
        .options(joinedload(ActiveSuggestion.client))
        .filter(
            ActiveSuggestion.status == SuggestionStatus.APPROVED,
            ActiveSuggestion.sent_at.is_(None),
        )
        .order_by(ActiveSuggestion.id)
        .all()
    )
    for sugg in suggestions:
        client_name = sugg.client.name if sugg.client else "unknown"
        try:
            relay.dispatch(
                "suggestion",
                {
                    "suggestion_id": sugg.id,
                    "client_id": sugg.client_id,
                    "client_name": client_name,
                    "target_number": _target(sugg.client),
                    "content": sugg.suggested_message,
                },
            )
            sugg.status = SuggestionStatus.SENT
            sugg.sent_at = datetime.utcnow()
            db.commit()
            logs.append(f"Suggestion sent for {client_name}")
        except Exception as e:
            db.rollback()
            logger.error(f"Suggestion dispatch failed for {sugg.id}: {e}")
            logs.append(f"Suggestion failed for {client_name}: {e}")


def process_automation(
    db: Session,
    relay: MessageRelay,
    now: Optional[datetime] = None,
    tz: Optional[tzinfo] = None,
) -> List[str]:
    """Run the three send stages and return their log lines."""
    current = local_now(now, tz)
    now_utc = current.astimezone(timezone.utc)
    logs: List[str] = []

    process_scheduled_messages(db, relay, now_utc, logs)
    process_scheduled_reports(db, relay, now_utc, current.tzinfo, logs)
    process_approved_suggestions(db, relay, logs)

    for line in logs:
        logger.info(line)
    return logs
