"""AI check-in suggestion generation.

For every active automation scheduled for today's weekday, gather the client's
recent messages and tasks, ask the language model for candidate WhatsApp
messages and store them as a pending suggestion for human approval.
"""

import json
import logging
from dataclasses import dataclass
from datetime import date, datetime, timedelta, timezone, tzinfo
from typing import Callable, List, Optional
from zoneinfo import ZoneInfo

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session, joinedload

from paralello.config import settings
from paralello.core.credentials import resolve_openai_api_key
from paralello.core.errors import ExternalServiceError, ParseError
from paralello.core.scheduling import sunday_weekday, utc_naive
from paralello.models.automation import ActiveAutomation, ActiveSuggestion, SuggestionStatus
from paralello.models.message import Message
from paralello.models.task import Task
from paralello.providers.base import ChatCompletionProvider

logger = logging.getLogger(__name__)

SYSTEM_PROMPT = "Você é um assistente útil. Sempre responda em JSON válido quando solicitado."

OPTION_COUNT = 3


@dataclass
class SuggestionContext:
    """Recent activity gathered for one client."""

    client_name: str
    days: int
    messages: List[Message]
    tasks: List[Task]

    @property
    def summary(self) -> str:
        return f"Analisadas {len(self.messages)} mensagens e {len(self.tasks)} tarefas."


def local_now(now: Optional[datetime] = None, tz: Optional[tzinfo] = None) -> datetime:
    """Current instant in the configured wall-clock zone."""
    zone = tz or ZoneInfo(settings.timezone)
    if now is None:
        return datetime.now(zone)
    if now.tzinfo is None:
        now = now.replace(tzinfo=timezone.utc)
    return now.astimezone(zone)


def due_automations(db: Session, weekday: int) -> List[ActiveAutomation]:
    """Active automations whose weekday set includes ``weekday``."""
    automations = (
        db.query(ActiveAutomation)
        .options(joinedload(ActiveAutomation.client))
        .filter(ActiveAutomation.is_active == True)  # noqa: E712
        .order_by(ActiveAutomation.id)
        .all()
    )
    # weekdays is a JSON array, matched in memory
    return [a for a in automations if a.runs_on(weekday)]


def suggestion_exists(db: Session, automation_id: int, day: date) -> bool:
    return (
        db.query(ActiveSuggestion.id)
        .filter(
            ActiveSuggestion.automation_id == automation_id,
            ActiveSuggestion.suggestion_date == day,
        )
        .first()
        is not None
    )


def fetch_context(db: Session, automation: ActiveAutomation, now_utc: datetime) -> SuggestionContext:
    """Messages and tasks for the client within the automation's context window."""
    days = automation.context_days or settings.default_context_days
    since = utc_naive(now_utc) - timedelta(days=days)

    messages = (
        db.query(Message)
        .filter(Message.client_id == automation.client_id, Message.created_at >= since)
        .order_by(Message.created_at.asc())
        .limit(settings.context_message_limit)
        .all()
    )
    tasks = (
        db.query(Task)
        .filter(Task.client_id == automation.client_id, Task.created_at >= since)
        .order_by(Task.created_at.asc())
        .limit(settings.context_task_limit)
        .all()
    )
    return SuggestionContext(
        client_name=automation.client.name,
        days=days,
        messages=messages,
        tasks=tasks,
    )


def build_prompt(context: SuggestionContext, custom_prompt: Optional[str] = None) -> str:
    """Customer-success prompt asking for a JSON array of message options."""
    message_lines = "\n".join(f"[{m.sender_type}]: {m.content}" for m in context.messages)
    task_lines = "\n".join(f"- {t.title} ({t.status})" for t in context.tasks)

    prompt = f"""Você é um Gerente de Sucesso do Cliente (CS). Seu objetivo é manter o cliente engajado.

Analise o contexto abaixo dos últimos {context.days} dias.
Escreva {OPTION_COUNT} OPÇÕES DIFERENTES de mensagens de WhatsApp CURTAS e AMIGÁVEIS para enviar a este cliente hoje.

Regras para CADA mensagem:
- Se houve tarefas concluídas, mencione brevemente.
- Se o cliente falou algo importante, mostre que você lembra.
- Se está silêncio, apenas pergunte como estão as coisas.
- NÃO use saudações genéricas como "Prezado". Use "Olá {context.client_name}" ou similar.
- A mensagem deve parecer escrita por um humano, sem formatação excessiva.
- Cada opção deve ter um tom ligeiramente diferente (mais formal, mais casual, mais direto).

CONTEXTO:
Cliente: {context.client_name}

Últimas Mensagens:
{message_lines or "Nenhuma mensagem recente."}

Tarefas Recentes:
{task_lines or "Nenhuma tarefa recente."}
"""
    if custom_prompt and custom_prompt.strip():
        prompt += f"\nOrientações adicionais da equipe:\n{custom_prompt.strip()}\n"

    prompt += f"""
Responda APENAS com um JSON array contendo {OPTION_COUNT} strings, exemplo:
["Mensagem 1...", "Mensagem 2...", "Mensagem 3..."]"""
    return prompt


def _strip_code_fence(text: str) -> str:
    if "```json" in text:
        return text.split("```json")[1].split("```")[0].strip()
    if "```" in text:
        return text.split("```")[1].split("```")[0].strip()
    return text


def parse_options(raw: str) -> List[str]:
    """Parse a JSON array of non-empty strings. Raises ParseError otherwise."""
    text = _strip_code_fence(raw.strip())
    try:
        data = json.loads(text)
    except json.JSONDecodeError as e:
        raise ParseError(f"Response is not valid JSON: {e}", raw=raw) from e
    if not isinstance(data, list):
        raise ParseError("Response is not a JSON array", raw=raw)
    options = [item.strip() for item in data if isinstance(item, str) and item.strip()]
    if not options:
        raise ParseError("Response array has no message options", raw=raw)
    return options


def parse_options_lenient(raw: str) -> List[str]:
    """Parse options, degrading to the raw text as a single option."""
    try:
        return parse_options(raw)
    except ParseError as e:
        logger.warning(f"Falling back to single option: {e}")
        return [raw.strip()]


def generate_for_automation(
    db: Session,
    llm: ChatCompletionProvider,
    automation: ActiveAutomation,
    now_utc: datetime,
    today: date,
) -> ActiveSuggestion:
    """Fetch context, call the model and persist one pending suggestion."""
    context = fetch_context(db, automation, now_utc)
    prompt = build_prompt(context, automation.custom_prompt)

    raw = llm.complete(SYSTEM_PROMPT, prompt, max_tokens=settings.llm_max_tokens)
    if not raw or not raw.strip():
        raise ExternalServiceError("Empty response from AI", client_name=context.client_name)

    options = parse_options_lenient(raw)
    suggestion = ActiveSuggestion(
        automation_id=automation.id,
        client_id=automation.client_id,
        suggestion_date=today,
        suggested_options=options,
        suggested_message=options[0],
        context_summary=context.summary,
        status=SuggestionStatus.PENDING,
        created_at=utc_naive(now_utc),
    )
    db.add(suggestion)
    db.commit()
    return suggestion


def generate_suggestions(
    db: Session,
    llm: ChatCompletionProvider,
    now: Optional[datetime] = None,
    tz: Optional[tzinfo] = None,
) -> List[str]:
    """
    Run one suggestion batch and return human-readable log lines.

    Each automation is processed independently: a failure for one client is
    logged and the batch continues with the next.
    """
    current = local_now(now, tz)
    now_utc = current.astimezone(timezone.utc)
    today = current.date()
    weekday = sunday_weekday(today)

    logs: List[str] = []
    automations = due_automations(db, weekday)
    logger.info(f"{len(automations)} automation(s) scheduled for weekday {weekday}")

    for automation in automations:
        client_name = automation.client.name if automation.client else "unknown"
        try:
            if suggestion_exists(db, automation.id, today):
                logs.append(f"Skipping {client_name}: Suggestion already exists for today.")
                continue

            suggestion = generate_for_automation(db, llm, automation, now_utc, today)
            logs.append(f"Generated {len(suggestion.suggested_options)} suggestion(s) for {client_name}")
        except IntegrityError:
            # Another run inserted today's row between the check and the insert
            db.rollback()
            logs.append(f"Skipping {client_name}: Suggestion already exists for today.")
        except Exception as e:
            db.rollback()
            logger.error(f"Error processing automation {automation.id} ({client_name}): {e}", exc_info=True)
            logs.append(f"Error for {client_name}: {e}")

    for line in logs:
        logger.info(line)
    return logs


def run_suggestion_batch(
    db: Session,
    llm_factory: Optional[Callable[[str], ChatCompletionProvider]] = None,
    now: Optional[datetime] = None,
) -> List[str]:
    """Resolve credentials, build the model client and run a batch.

    Raises ConfigurationError when no API key is configured.
    """
    api_key = resolve_openai_api_key(db)
    if llm_factory is None:
        from paralello.providers.openai_llm import OpenAIChatProvider

        llm_factory = OpenAIChatProvider
    return generate_suggestions(db, llm_factory(api_key), now=now)
