"""Initial automation schema

Revision ID: 001
Revises: 
Create Date: 2026-01-12 00:00:00.000000

"""
from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision = '001'
down_revision = None
branch_labels = None
depends_on = None

cadence_kind = sa.Enum('DAILY', 'WEEKLY', 'MONTHLY', name='cadencekind')
execution_status = sa.Enum('SUCCESS', 'FAILED', name='executionstatus')
message_category = sa.Enum('HOLIDAY', 'MEETING', 'PAYMENT', 'REMINDER', 'OTHER', name='messagecategory')
dispatch_status = sa.Enum('PENDING', 'SENT', 'FAILED', 'CANCELLED', name='dispatchstatus')
suggestion_status = sa.Enum('PENDING', 'APPROVED', 'REJECTED', 'SENT', name='suggestionstatus')


def upgrade() -> None:
    # Organizations and clients
    op.create_table(
        'organizations',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('name', sa.String(length=255), nullable=False),
        sa.Column('created_at', sa.DateTime(), nullable=True),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index(op.f('ix_organizations_id'), 'organizations', ['id'], unique=False)

    op.create_table(
        'clients',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('organization_id', sa.Integer(), nullable=False),
        sa.Column('name', sa.String(length=255), nullable=False),
        sa.Column('whatsapp', sa.String(length=50), nullable=True),
        sa.Column('whatsapp_group_id', sa.String(length=100), nullable=True),
        sa.Column('is_active', sa.Boolean(), nullable=True),
        sa.Column('created_at', sa.DateTime(), nullable=True),
        sa.Column('updated_at', sa.DateTime(), nullable=True),
        sa.ForeignKeyConstraint(['organization_id'], ['organizations.id']),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index(op.f('ix_clients_id'), 'clients', ['id'], unique=False)
    op.create_index(op.f('ix_clients_organization_id'), 'clients', ['organization_id'], unique=False)

    # Tasks and messages
    op.create_table(
        'tasks',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('organization_id', sa.Integer(), nullable=False),
        sa.Column('client_id', sa.Integer(), nullable=True),
        sa.Column('title', sa.String(length=255), nullable=False),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column('status', sa.String(length=50), nullable=True),
        sa.Column('created_at', sa.DateTime(), nullable=True),
        sa.Column('updated_at', sa.DateTime(), nullable=True),
        sa.ForeignKeyConstraint(['organization_id'], ['organizations.id']),
        sa.ForeignKeyConstraint(['client_id'], ['clients.id']),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index(op.f('ix_tasks_id'), 'tasks', ['id'], unique=False)
    op.create_index('idx_task_client_created', 'tasks', ['client_id', 'created_at'], unique=False)

    op.create_table(
        'messages',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('organization_id', sa.Integer(), nullable=False),
        sa.Column('client_id', sa.Integer(), nullable=True),
        sa.Column('task_id', sa.Integer(), nullable=True),
        sa.Column('channel_id', sa.Integer(), nullable=True),
        sa.Column('sender_type', sa.String(length=50), nullable=False),
        sa.Column('content', sa.Text(), nullable=False),
        sa.Column('provider_message_id', sa.String(length=255), nullable=True),
        sa.Column('delivery_status', sa.String(length=20), nullable=True),
        sa.Column('created_at', sa.DateTime(), nullable=True),
        sa.ForeignKeyConstraint(['organization_id'], ['organizations.id']),
        sa.ForeignKeyConstraint(['client_id'], ['clients.id']),
        sa.ForeignKeyConstraint(['task_id'], ['tasks.id']),
        sa.CheckConstraint(
            '(client_id IS NOT NULL)::int + (task_id IS NOT NULL)::int + (channel_id IS NOT NULL)::int = 1',
            name='ck_message_single_context',
        ),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index(op.f('ix_messages_id'), 'messages', ['id'], unique=False)
    op.create_index(op.f('ix_messages_provider_message_id'), 'messages', ['provider_message_id'], unique=False)
    op.create_index('idx_message_client_created', 'messages', ['client_id', 'created_at'], unique=False)

    # Scheduled reports
    op.create_table(
        'scheduled_reports',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('organization_id', sa.Integer(), nullable=False),
        sa.Column('client_id', sa.Integer(), nullable=False),
        sa.Column('name', sa.String(length=255), nullable=False),
        sa.Column('frequency', cadence_kind, nullable=False),
        sa.Column('weekday', sa.Integer(), nullable=True),
        sa.Column('day_of_month', sa.Integer(), nullable=True),
        sa.Column('time_of_day', sa.String(length=5), nullable=False),
        sa.Column('metrics', sa.JSON(), nullable=True),
        sa.Column('template', sa.Text(), nullable=True),
        sa.Column('is_active', sa.Boolean(), nullable=True),
        sa.Column('next_run', sa.DateTime(), nullable=True),
        sa.Column('last_run', sa.DateTime(), nullable=True),
        sa.Column('created_by', sa.Integer(), nullable=True),
        sa.Column('created_at', sa.DateTime(), nullable=True),
        sa.Column('updated_at', sa.DateTime(), nullable=True),
        sa.ForeignKeyConstraint(['organization_id'], ['organizations.id']),
        sa.ForeignKeyConstraint(['client_id'], ['clients.id']),
        sa.CheckConstraint('weekday IS NULL OR weekday BETWEEN 0 AND 6', name='ck_report_weekday'),
        sa.CheckConstraint('day_of_month IS NULL OR day_of_month BETWEEN 1 AND 31', name='ck_report_day_of_month'),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index(op.f('ix_scheduled_reports_id'), 'scheduled_reports', ['id'], unique=False)
    op.create_index('idx_report_active_next_run', 'scheduled_reports', ['is_active', 'next_run'], unique=False)

    op.create_table(
        'report_executions',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('report_id', sa.Integer(), nullable=False),
        sa.Column('status', execution_status, nullable=False),
        sa.Column('message_sent', sa.Text(), nullable=True),
        sa.Column('metrics_snapshot', sa.JSON(), nullable=True),
        sa.Column('error_message', sa.Text(), nullable=True),
        sa.Column('executed_at', sa.DateTime(), nullable=True),
        sa.ForeignKeyConstraint(['report_id'], ['scheduled_reports.id']),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index(op.f('ix_report_executions_report_id'), 'report_executions', ['report_id'], unique=False)

    # Dispatches
    op.create_table(
        'scheduled_messages',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('organization_id', sa.Integer(), nullable=False),
        sa.Column('client_id', sa.Integer(), nullable=False),
        sa.Column('scheduled_at', sa.DateTime(), nullable=False),
        sa.Column('message', sa.Text(), nullable=False),
        sa.Column('category', message_category, nullable=False),
        sa.Column('status', dispatch_status, nullable=False),
        sa.Column('sent_at', sa.DateTime(), nullable=True),
        sa.Column('created_by', sa.Integer(), nullable=True),
        sa.Column('created_at', sa.DateTime(), nullable=True),
        sa.ForeignKeyConstraint(['organization_id'], ['organizations.id']),
        sa.ForeignKeyConstraint(['client_id'], ['clients.id']),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index(op.f('ix_scheduled_messages_id'), 'scheduled_messages', ['id'], unique=False)
    op.create_index('idx_dispatch_status_scheduled', 'scheduled_messages', ['status', 'scheduled_at'], unique=False)

    # Automations and suggestions
    op.create_table(
        'active_automations',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('organization_id', sa.Integer(), nullable=False),
        sa.Column('client_id', sa.Integer(), nullable=False),
        sa.Column('name', sa.String(length=255), nullable=False),
        sa.Column('weekdays', sa.JSON(), nullable=True),
        sa.Column('time_of_day', sa.String(length=5), nullable=True),
        sa.Column('context_days', sa.Integer(), nullable=True),
        sa.Column('assigned_approver', sa.Integer(), nullable=True),
        sa.Column('custom_prompt', sa.Text(), nullable=True),
        sa.Column('is_active', sa.Boolean(), nullable=True),
        sa.Column('created_at', sa.DateTime(), nullable=True),
        sa.Column('updated_at', sa.DateTime(), nullable=True),
        sa.ForeignKeyConstraint(['organization_id'], ['organizations.id']),
        sa.ForeignKeyConstraint(['client_id'], ['clients.id']),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index(op.f('ix_active_automations_id'), 'active_automations', ['id'], unique=False)
    op.create_index(op.f('ix_active_automations_is_active'), 'active_automations', ['is_active'], unique=False)

    op.create_table(
        'active_suggestions',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('automation_id', sa.Integer(), nullable=False),
        sa.Column('client_id', sa.Integer(), nullable=False),
        sa.Column('suggestion_date', sa.Date(), nullable=False),
        sa.Column('suggested_options', sa.JSON(), nullable=True),
        sa.Column('suggested_message', sa.Text(), nullable=False),
        sa.Column('context_summary', sa.Text(), nullable=True),
        sa.Column('status', suggestion_status, nullable=False),
        sa.Column('approved_by', sa.Integer(), nullable=True),
        sa.Column('approved_at', sa.DateTime(), nullable=True),
        sa.Column('sent_at', sa.DateTime(), nullable=True),
        sa.Column('created_at', sa.DateTime(), nullable=True),
        sa.ForeignKeyConstraint(['automation_id'], ['active_automations.id']),
        sa.ForeignKeyConstraint(['client_id'], ['clients.id']),
        sa.UniqueConstraint('automation_id', 'suggestion_date', name='uq_suggestion_automation_day'),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index(op.f('ix_active_suggestions_id'), 'active_suggestions', ['id'], unique=False)
    op.create_index(op.f('ix_active_suggestions_status'), 'active_suggestions', ['status'], unique=False)

    # Templates and settings
    op.create_table(
        'templates',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('organization_id', sa.Integer(), nullable=True),
        sa.Column('name', sa.String(length=255), nullable=False),
        sa.Column('category', sa.String(length=50), nullable=False),
        sa.Column('content', sa.Text(), nullable=False),
        sa.Column('is_default', sa.Boolean(), nullable=True),
        sa.Column('created_at', sa.DateTime(), nullable=True),
        sa.Column('updated_at', sa.DateTime(), nullable=True),
        sa.ForeignKeyConstraint(['organization_id'], ['organizations.id']),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index(op.f('ix_templates_id'), 'templates', ['id'], unique=False)

    op.create_table(
        'system_settings',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('key', sa.String(length=100), nullable=False),
        sa.Column('value', sa.JSON(), nullable=True),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column('created_at', sa.DateTime(), nullable=True),
        sa.Column('updated_at', sa.DateTime(), nullable=True),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index(op.f('ix_system_settings_key'), 'system_settings', ['key'], unique=True)

    # AI agent conversations
    op.create_table(
        'ai_conversations',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('agent_id', sa.Integer(), nullable=False),
        sa.Column('contact_identifier', sa.String(length=255), nullable=False),
        sa.Column('contact_name', sa.String(length=255), nullable=True),
        sa.Column('contact_phone', sa.String(length=50), nullable=True),
        sa.Column('status', sa.String(length=50), nullable=False),
        sa.Column('summary', sa.Text(), nullable=True),
        sa.Column('sentiment', sa.String(length=20), nullable=True),
        sa.Column('sentiment_score', sa.Float(), nullable=True),
        sa.Column('session_metrics', sa.JSON(), nullable=True),
        sa.Column('resolution_reason', sa.Text(), nullable=True),
        sa.Column('is_manual_override', sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column('last_interaction_at', sa.DateTime(), nullable=True),
        sa.Column('created_at', sa.DateTime(), nullable=True),
        sa.UniqueConstraint('agent_id', 'contact_identifier', name='uq_conversation_agent_contact'),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index(op.f('ix_ai_conversations_agent_id'), 'ai_conversations', ['agent_id'], unique=False)

    op.create_table(
        'ai_conversation_messages',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('conversation_id', sa.Integer(), nullable=False),
        sa.Column('role', sa.String(length=20), nullable=False),
        sa.Column('content', sa.Text(), nullable=False),
        sa.Column('tokens_used', sa.Integer(), nullable=True),
        sa.Column('metadata', sa.JSON(), nullable=True),
        sa.Column('created_at', sa.DateTime(), nullable=True),
        sa.ForeignKeyConstraint(['conversation_id'], ['ai_conversations.id']),
        sa.PrimaryKeyConstraint('id')
    )

    # Marketing metric sources
    op.create_table(
        'marketing_leads',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('client_id', sa.Integer(), nullable=False),
        sa.Column('name', sa.String(length=255), nullable=True),
        sa.Column('first_interaction_at', sa.DateTime(), nullable=False),
        sa.ForeignKeyConstraint(['client_id'], ['clients.id']),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index(op.f('ix_marketing_leads_first_interaction_at'), 'marketing_leads', ['first_interaction_at'], unique=False)

    op.create_table(
        'marketing_conversions',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('client_id', sa.Integer(), nullable=False),
        sa.Column('revenue', sa.Float(), nullable=True),
        sa.Column('converted_at', sa.DateTime(), nullable=False),
        sa.ForeignKeyConstraint(['client_id'], ['clients.id']),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index(op.f('ix_marketing_conversions_converted_at'), 'marketing_conversions', ['converted_at'], unique=False)

    op.create_table(
        'marketing_daily_performance',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('client_id', sa.Integer(), nullable=False),
        sa.Column('date', sa.Date(), nullable=False),
        sa.Column('investment', sa.Float(), nullable=True),
        sa.Column('clicks', sa.Integer(), nullable=True),
        sa.Column('impressions', sa.Integer(), nullable=True),
        sa.Column('created_at', sa.DateTime(), nullable=True),
        sa.ForeignKeyConstraint(['client_id'], ['clients.id']),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index('idx_performance_client_date', 'marketing_daily_performance', ['client_id', 'date'], unique=False)


def downgrade() -> None:
    op.drop_table('marketing_daily_performance')
    op.drop_table('marketing_conversions')
    op.drop_table('marketing_leads')
    op.drop_table('ai_conversation_messages')
    op.drop_table('ai_conversations')
    op.drop_table('system_settings')
    op.drop_table('templates')
    op.drop_table('active_suggestions')
    op.drop_table('active_automations')
    op.drop_table('scheduled_messages')
    op.drop_table('report_executions')
    op.drop_table('scheduled_reports')
    op.drop_table('messages')
    op.drop_table('tasks')
    op.drop_table('clients')
    op.drop_table('organizations')
    for enum_type in (suggestion_status, dispatch_status, message_category, execution_status, cadence_kind):
        enum_type.drop(op.get_bind(), checkfirst=True)
