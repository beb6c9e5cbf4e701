"""Database models."""

from paralello.models.organization import Organization, Client
from paralello.models.task import Task
from paralello.models.message import Message
from paralello.models.report import ScheduledReport, ReportExecution, ExecutionStatus
from paralello.models.dispatch import ScheduledMessage, DispatchStatus, MessageCategory
from paralello.models.automation import ActiveAutomation, ActiveSuggestion, SuggestionStatus
from paralello.models.template import Template
from paralello.models.setting import SystemSetting
from paralello.models.conversation import AIConversation, AIConversationMessage
from paralello.models.marketing import MarketingLead, MarketingConversion, MarketingDailyPerformance

__all__ = [
    "Organization",
    "Client",
    "Task",
    "Message",
    "ScheduledReport",
    "ReportExecution",
    "ExecutionStatus",
    "ScheduledMessage",
    "DispatchStatus",
    "MessageCategory",
    "ActiveAutomation",
    "ActiveSuggestion",
    "SuggestionStatus",
    "Template",
    "SystemSetting",
    "AIConversation",
    "AIConversationMessage",
    "MarketingLead",
    "MarketingConversion",
    "MarketingDailyPerformance",
]
