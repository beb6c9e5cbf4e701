"""Scheduled report composition."""

import logging
from dataclasses import asdict, dataclass
from datetime import date, datetime, timedelta
from typing import Dict, List, Optional, Tuple

from sqlalchemy import func
from sqlalchemy.orm import Session

from paralello.core.scheduling import CadenceKind
from paralello.core.templating import Count, Currency, Percent, Ratio, render
from paralello.models.marketing import MarketingConversion, MarketingDailyPerformance, MarketingLead

logger = logging.getLogger(__name__)

# Metric keys a report can select, with their pt-BR labels
AVAILABLE_METRICS: Dict[str, str] = {
    "leads": "Leads",
    "conversions": "Conversões",
    "cpl": "CPL (Custo por Lead)",
    "revenue": "Receita",
    "investment": "Investimento",
    "conversion_rate": "Taxa de Conversão",
    "roas": "ROAS",
    "clicks": "Cliques",
    "impressions": "Impressões",
    "ctr": "CTR",
}


@dataclass
class ReportMetrics:
    """Aggregated marketing metrics for one client and period."""

    leads: int = 0
    conversions: int = 0
    revenue: float = 0.0
    investment: float = 0.0
    clicks: int = 0
    impressions: int = 0

    @property
    def cpl(self) -> float:
        return self.investment / self.leads if self.leads else 0.0

    @property
    def roas(self) -> float:
        return self.revenue / self.investment if self.investment else 0.0

    @property
    def conversion_rate(self) -> float:
        return self.conversions / self.leads * 100 if self.leads else 0.0

    @property
    def ctr(self) -> float:
        return self.clicks / self.impressions * 100 if self.impressions else 0.0

    def snapshot(self) -> Dict:
        data = asdict(self)
        data.update(cpl=self.cpl, roas=self.roas, conversion_rate=self.conversion_rate, ctr=self.ctr)
        return data


def _br_date(value: date) -> str:
    return value.strftime("%d/%m/%Y")


def report_period(kind: CadenceKind, today: date) -> Tuple[date, date, str]:
    """
    Data period covered by a report sent on ``today``.

    daily: yesterday; weekly: the 7 days ending yesterday; monthly: the
    previous calendar month.
    """
    kind = CadenceKind(kind)
    end = today - timedelta(days=1)
    if kind == CadenceKind.DAILY:
        return end, end, _br_date(end)
    if kind == CadenceKind.WEEKLY:
        start = end - timedelta(days=6)
    else:
        end = today.replace(day=1) - timedelta(days=1)
        start = end.replace(day=1)
    return start, end, f"{_br_date(start)} a {_br_date(end)}"


def collect_metrics(db: Session, client_id: int, start: date, end: date) -> ReportMetrics:
    """Aggregate leads, conversions and ad performance between ``start`` and ``end`` inclusive."""
    range_start = datetime.combine(start, datetime.min.time())
    range_end = datetime.combine(end + timedelta(days=1), datetime.min.time())

    leads = (
        db.query(func.count(MarketingLead.id))
        .filter(
            MarketingLead.client_id == client_id,
            MarketingLead.first_interaction_at >= range_start,
            MarketingLead.first_interaction_at < range_end,
        )
        .scalar()
    )
    conversions, revenue = (
        db.query(func.count(MarketingConversion.id), func.coalesce(func.sum(MarketingConversion.revenue), 0))
        .filter(
            MarketingConversion.client_id == client_id,
            MarketingConversion.converted_at >= range_start,
            MarketingConversion.converted_at < range_end,
        )
        .one()
    )
    investment, clicks, impressions = (
        db.query(
            func.coalesce(func.sum(MarketingDailyPerformance.investment), 0),
            func.coalesce(func.sum(MarketingDailyPerformance.clicks), 0),
            func.coalesce(func.sum(MarketingDailyPerformance.impressions), 0),
        )
        .filter(
            MarketingDailyPerformance.client_id == client_id,
            MarketingDailyPerformance.date >= start,
            MarketingDailyPerformance.date <= end,
        )
        .one()
    )
    return ReportMetrics(
        leads=leads or 0,
        conversions=conversions or 0,
        revenue=float(revenue or 0),
        investment=float(investment or 0),
        clicks=int(clicks or 0),
        impressions=int(impressions or 0),
    )


def build_report_values(client_name: str, period_text: str, metrics: ReportMetrics) -> Dict:
    """Placeholder values for a report template."""
    return {
        "client_nome": client_name,
        "period": period_text,
        "leads": Count(metrics.leads),
        "conversions": Count(metrics.conversions),
        "revenue": Currency(metrics.revenue),
        "investment": Currency(metrics.investment),
        "spend": Currency(metrics.investment),
        "cpl": Currency(metrics.cpl),
        "roas": Ratio(metrics.roas),
        "conversion_rate": Percent(metrics.conversion_rate),
        "clicks": Count(metrics.clicks),
        "impressions": Count(metrics.impressions),
        "ctr": Percent(metrics.ctr),
    }


def default_template(metric_keys: Optional[List[str]]) -> str:
    """Plain report body listing the selected metrics."""
    keys = [k for k in (metric_keys or []) if k in AVAILABLE_METRICS] or list(AVAILABLE_METRICS)[:4]
    lines = ["Olá {{client_nome}}! Segue o relatório do período {{period}}:", ""]
    lines.extend(f"{AVAILABLE_METRICS[key]}: {{{{{key}}}}}" for key in keys)
    return "\n".join(lines)


def build_report_message(report, metrics: ReportMetrics, period_text: str) -> str:
    """Render the report's template (or the default body) with ``metrics``."""
    template = report.template if report.template and report.template.strip() else default_template(report.metrics)
    values = build_report_values(report.client.name, period_text, metrics)
    return render(template, values)
