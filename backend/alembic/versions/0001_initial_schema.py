"""Initial schema

Revision ID: 0001_initial_schema
Revises: 
Create Date: 2026-10-19

Creates the GenAI Hub tables:
- users, user_profiles: identity and contact details
- subscription_plans, payments: plan catalog and purchases
- ai_services, custom_agents, ai_interactions: AI catalog, agents, audit log
"""
from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision = '0001_initial_schema'
down_revision = None
branch_labels = None
depends_on = None


def upgrade() -> None:
    op.create_table(
        'users',
        sa.Column('id', sa.UUID(), nullable=False),
        sa.Column('name', sa.String(255), nullable=False),
        sa.Column('email', sa.String(255), nullable=False),
        sa.Column('is_admin', sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index('ix_users_email', 'users', ['email'], unique=True)
    
    op.create_table(
        'user_profiles',
        sa.Column('id', sa.UUID(), nullable=False),
        sa.Column('user_id', sa.UUID(), nullable=False),
        sa.Column('full_name', sa.String(255), nullable=True),
        sa.Column('phone', sa.String(20), nullable=True),
        sa.Column('address', sa.String(255), nullable=True),
        sa.Column('city', sa.String(100), nullable=True),
        sa.Column('state', sa.String(100), nullable=True),
        sa.Column('country', sa.String(100), nullable=True),
        sa.Column('postal_code', sa.String(20), nullable=True),
        sa.Column('company', sa.String(255), nullable=True),
        sa.Column('job_title', sa.String(255), nullable=True),
        sa.Column('avatar', sa.String(500), nullable=True),
        sa.Column('bio', sa.String(1000), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=False),
        sa.ForeignKeyConstraint(['user_id'], ['users.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index('ix_user_profiles_user_id', 'user_profiles', ['user_id'], unique=True)
    
    op.create_table(
        'subscription_plans',
        sa.Column('id', sa.UUID(), nullable=False),
        sa.Column('name', sa.String(255), nullable=False),
        sa.Column('description', sa.Text(), nullable=False),
        sa.Column('price', sa.Numeric(10, 2), nullable=False),
        sa.Column('billing_period', sa.String(20), nullable=False, server_default='monthly'),
        sa.Column('ai_requests_limit', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('custom_agents_limit', sa.Integer(), nullable=False, server_default='1'),
        sa.Column('can_use_chatgpt', sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column('can_use_gemini', sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column('can_use_deepseek', sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column('is_active', sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column('stripe_price_id', sa.String(255), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=False),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index('ix_subscription_plans_is_active', 'subscription_plans', ['is_active'], unique=False)
    
    op.create_table(
        'payments',
        sa.Column('id', sa.UUID(), nullable=False),
        sa.Column('user_id', sa.UUID(), nullable=False),
        sa.Column('subscription_plan_id', sa.UUID(), nullable=False),
        sa.Column('amount', sa.Numeric(10, 2), nullable=False),
        sa.Column('payment_method', sa.String(50), nullable=False),
        sa.Column('payment_id', sa.String(255), nullable=True),
        sa.Column('payer_id', sa.String(255), nullable=True),
        sa.Column('payer_email', sa.String(255), nullable=True),
        sa.Column('status', sa.String(20), nullable=False, server_default='pending'),
        sa.Column('paid_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('subscription_starts_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('subscription_ends_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('is_recurring', sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column('payment_data', sa.JSON(), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=False),
        sa.ForeignKeyConstraint(['user_id'], ['users.id']),
        sa.ForeignKeyConstraint(['subscription_plan_id'], ['subscription_plans.id']),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index('ix_payments_user_id', 'payments', ['user_id'], unique=False)
    op.create_index('ix_payments_subscription_plan_id', 'payments', ['subscription_plan_id'], unique=False)
    op.create_index('ix_payments_payment_id', 'payments', ['payment_id'], unique=False)
    op.create_index('ix_payments_status', 'payments', ['status'], unique=False)
    op.create_index('ix_payments_subscription_ends_at', 'payments', ['subscription_ends_at'], unique=False)
    
    op.create_table(
        'ai_services',
        sa.Column('id', sa.UUID(), nullable=False),
        sa.Column('name', sa.String(255), nullable=False),
        sa.Column('provider', sa.String(50), nullable=False),
        sa.Column('model', sa.String(100), nullable=False),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column('is_active', sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column('cost_per_request', sa.Numeric(10, 4), nullable=False, server_default='0'),
        sa.Column('parameters', sa.JSON(), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=False),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index('ix_ai_services_provider', 'ai_services', ['provider'], unique=False)
    op.create_index('ix_ai_services_is_active', 'ai_services', ['is_active'], unique=False)
    
    op.create_table(
        'custom_agents',
        sa.Column('id', sa.UUID(), nullable=False),
        sa.Column('user_id', sa.UUID(), nullable=False),
        sa.Column('ai_service_id', sa.UUID(), nullable=False),
        sa.Column('name', sa.String(255), nullable=False),
        sa.Column('description', sa.Text(), nullable=False),
        sa.Column('instructions', sa.Text(), nullable=False),
        sa.Column('knowledge_base', sa.Text(), nullable=True),
        sa.Column('parameters', sa.JSON(), nullable=True),
        sa.Column('is_public', sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column('is_active', sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column('usage_count', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=False),
        sa.ForeignKeyConstraint(['user_id'], ['users.id'], ondelete='CASCADE'),
        sa.ForeignKeyConstraint(['ai_service_id'], ['ai_services.id']),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index('ix_custom_agents_user_id', 'custom_agents', ['user_id'], unique=False)
    op.create_index('ix_custom_agents_is_public', 'custom_agents', ['is_public'], unique=False)
    
    op.create_table(
        'ai_interactions',
        sa.Column('id', sa.UUID(), nullable=False),
        sa.Column('user_id', sa.UUID(), nullable=False),
        sa.Column('ai_service_id', sa.UUID(), nullable=False),
        sa.Column('custom_agent_id', sa.UUID(), nullable=True),
        sa.Column('prompt', sa.Text(), nullable=False),
        sa.Column('response', sa.Text(), nullable=True),
        sa.Column('tokens_used', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('cost', sa.Numeric(12, 6), nullable=False, server_default='0'),
        sa.Column('is_successful', sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column('error_message', sa.Text(), nullable=True),
        sa.Column('metadata', sa.JSON(), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=False),
        sa.ForeignKeyConstraint(['user_id'], ['users.id'], ondelete='CASCADE'),
        sa.ForeignKeyConstraint(['ai_service_id'], ['ai_services.id']),
        sa.ForeignKeyConstraint(['custom_agent_id'], ['custom_agents.id'], ondelete='SET NULL'),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index('ix_ai_interactions_user_id', 'ai_interactions', ['user_id'], unique=False)
    op.create_index('ix_ai_interactions_custom_agent_id', 'ai_interactions', ['custom_agent_id'], unique=False)
    op.create_index(
        'idx_ai_interactions_user_created',
        'ai_interactions',
        ['user_id', 'created_at'],
        unique=False,
    )


def downgrade() -> None:
    op.drop_index('idx_ai_interactions_user_created', table_name='ai_interactions')
    op.drop_index('ix_ai_interactions_custom_agent_id', table_name='ai_interactions')
    op.drop_index('ix_ai_interactions_user_id', table_name='ai_interactions')
    op.drop_table('ai_interactions')
    op.drop_index('ix_custom_agents_is_public', table_name='custom_agents')
    op.drop_index('ix_custom_agents_user_id', table_name='custom_agents')
    op.drop_table('custom_agents')
    op.drop_index('ix_ai_services_is_active', table_name='ai_services')
    op.drop_index('ix_ai_services_provider', table_name='ai_services')
    op.drop_table('ai_services')
    op.drop_index('ix_payments_subscription_ends_at', table_name='payments')
    op.drop_index('ix_payments_status', table_name='payments')
    op.drop_index('ix_payments_payment_id', table_name='payments')
    op.drop_index('ix_payments_subscription_plan_id', table_name='payments')
    op.drop_index('ix_payments_user_id', table_name='payments')
    op.drop_table('payments')
    op.drop_index('ix_subscription_plans_is_active', table_name='subscription_plans')
    op.drop_table('subscription_plans')
    op.drop_index('ix_user_profiles_user_id', table_name='user_profiles')
    op.drop_table('user_profiles')
    op.drop_index('ix_users_email', table_name='users')
    op.drop_table('users')
