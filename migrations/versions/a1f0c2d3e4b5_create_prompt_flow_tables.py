"""create_prompt_flow_tables

Revision ID: a1f0c2d3e4b5
Revises:
Create Date: 2026-10-18 10:12:31.204118

"""
from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision = 'a1f0c2d3e4b5'
down_revision = None
branch_labels = None
depends_on = None


def upgrade():
    op.create_table('prompts',
        sa.Column('id', sa.String(length=36), nullable=False),
        sa.Column('user_id', sa.String(length=36), nullable=False),
        sa.Column('title', sa.String(length=255), nullable=True),
        sa.Column('content', sa.Text(), nullable=False),
        sa.Column('access', sa.String(length=20), nullable=False, server_default='private'),
        sa.Column('views', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.Column('updated_at', sa.DateTime(), nullable=False),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index('ix_prompts_user_id', 'prompts', ['user_id'], unique=False)

    op.create_table('prompt_flows',
        sa.Column('id', sa.String(length=36), nullable=False),
        sa.Column('user_id', sa.String(length=36), nullable=False),
        sa.Column('name', sa.String(length=255), nullable=False),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.Column('updated_at', sa.DateTime(), nullable=False),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index('ix_prompt_flows_user_id', 'prompt_flows', ['user_id'], unique=False)

    op.create_table('flow_steps',
        sa.Column('id', sa.String(length=36), nullable=False),
        sa.Column('flow_id', sa.String(length=36), nullable=False),
        sa.Column('prompt_id', sa.String(length=36), nullable=False),
        sa.Column('order_index', sa.Integer(), nullable=False),
        sa.Column('step_title', sa.String(length=255), nullable=False),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.PrimaryKeyConstraint('id'),
        sa.ForeignKeyConstraint(['flow_id'], ['prompt_flows.id'], ondelete='CASCADE'),
        sa.ForeignKeyConstraint(['prompt_id'], ['prompts.id'], ondelete='CASCADE'),
        sa.UniqueConstraint('flow_id', 'order_index', name='uq_flow_steps_flow_order')
    )
    op.create_index('idx_flow_steps_flow_id', 'flow_steps', ['flow_id'], unique=False)

    op.create_table('prompt_flow_step',
        sa.Column('id', sa.String(length=36), nullable=False),
        sa.Column('flow_step_id', sa.String(length=36), nullable=False),
        sa.Column('custom_content', sa.Text(), nullable=True),
        sa.Column('variables', sa.JSON(), nullable=True),
        sa.PrimaryKeyConstraint('id'),
        sa.ForeignKeyConstraint(['flow_step_id'], ['flow_steps.id'], ondelete='CASCADE'),
        sa.UniqueConstraint('flow_step_id')
    )

    op.create_table('api_keys',
        sa.Column('id', sa.String(length=36), nullable=False),
        sa.Column('user_id', sa.String(length=36), nullable=False),
        sa.Column('key', sa.String(length=255), nullable=False),
        sa.Column('key_type', sa.String(length=50), nullable=False, server_default='pbm_api_key'),
        sa.Column('name', sa.String(length=255), nullable=True),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('key')
    )
    op.create_index('ix_api_keys_user_id', 'api_keys', ['user_id'], unique=False)

    op.create_table('api_call_logs',
        sa.Column('id', sa.String(length=36), nullable=False),
        sa.Column('user_id', sa.String(length=36), nullable=False),
        sa.Column('endpoint', sa.String(length=500), nullable=False),
        sa.Column('method', sa.String(length=10), nullable=False),
        sa.Column('status', sa.Integer(), nullable=False),
        sa.Column('request_body', sa.JSON(), nullable=True),
        sa.Column('response_body', sa.JSON(), nullable=True),
        sa.Column('duration_ms', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('ip_address', sa.String(length=100), nullable=True),
        sa.Column('user_agent', sa.String(length=500), nullable=True),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index('ix_api_call_logs_user_id', 'api_call_logs', ['user_id'], unique=False)
    op.create_index('idx_api_call_logs_user_created', 'api_call_logs', ['user_id', 'created_at'], unique=False)


def downgrade():
    op.drop_index('idx_api_call_logs_user_created', table_name='api_call_logs')
    op.drop_index('ix_api_call_logs_user_id', table_name='api_call_logs')
    op.drop_table('api_call_logs')

    op.drop_index('ix_api_keys_user_id', table_name='api_keys')
    op.drop_table('api_keys')

    op.drop_table('prompt_flow_step')

    op.drop_index('idx_flow_steps_flow_id', table_name='flow_steps')
    op.drop_table('flow_steps')

    op.drop_index('ix_prompt_flows_user_id', table_name='prompt_flows')
    op.drop_table('prompt_flows')

    op.drop_index('ix_prompts_user_id', table_name='prompts')
    op.drop_table('prompts')
