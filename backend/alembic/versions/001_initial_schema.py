"""Initial schema

Revision ID: 001
Revises:
Create Date: 2026-10-18

"""
import uuid
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql

# revision identifiers, used by Alembic.
revision: str = '001'
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    # Create ENUM types (SQLAlchemy stores enum member names)
    op.execute("CREATE TYPE rule_type AS ENUM ('CREDIT_SCORE', 'LOAN_AMOUNT', 'BUREAU_RESPONSE', 'AGE_LIMIT')")
    op.execute("CREATE TYPE rule_operator AS ENUM ('GTE', 'LTE', 'GT', 'LT', 'EQ')")
    op.execute("CREATE TYPE rule_importance AS ENUM ('CRITICAL', 'HIGH', 'MEDIUM', 'LOW')")
    op.execute("CREATE TYPE rule_source AS ENUM ('MANUAL', 'MODEL')")
    op.execute("CREATE TYPE decision_outcome AS ENUM ('APPROVED', 'REJECTED')")

    # Create rule_configurations table
    rules = op.create_table(
        'rule_configurations',
        sa.Column('id', postgresql.UUID(as_uuid=True), primary_key=True, nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.text('now()'), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), server_default=sa.text('now()'), nullable=False),
        sa.Column('rule_name', sa.String(length=100), nullable=False),
        sa.Column('rule_type', postgresql.ENUM(name='rule_type', create_type=False), nullable=False),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column('threshold_value', sa.Numeric(precision=15, scale=2), nullable=False),
        sa.Column('operator', postgresql.ENUM(name='rule_operator', create_type=False), nullable=False),
        sa.Column('enabled', sa.Boolean(), nullable=False, server_default=sa.text('true')),
        sa.Column('priority', sa.Integer(), nullable=False, server_default='1'),
        sa.Column('importance', postgresql.ENUM(name='rule_importance', create_type=False), nullable=False),
        sa.Column('failure_message', sa.String(length=500), nullable=True),
        sa.Column('source', postgresql.ENUM(name='rule_source', create_type=False), nullable=False),
        sa.Column('confidence_score', sa.Numeric(precision=5, scale=2), nullable=True),
        sa.Column('model_version', sa.String(length=100), nullable=True),
        sa.Column('metadata', sa.JSON(), nullable=True),
        sa.Column('updated_by', sa.String(length=100), nullable=True),
    )
    op.create_index('ix_rule_configurations_rule_name', 'rule_configurations', ['rule_name'], unique=True)
    op.create_index('ix_rule_configurations_enabled', 'rule_configurations', ['enabled'])

    # Create decisions table
    op.create_table(
        'decisions',
        sa.Column('id', postgresql.UUID(as_uuid=True), primary_key=True, nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.text('now()'), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), server_default=sa.text('now()'), nullable=False),
        sa.Column('request_id', sa.String(length=64), nullable=False),
        sa.Column('decision', postgresql.ENUM(name='decision_outcome', create_type=False), nullable=False),
        sa.Column('credit_score', sa.Numeric(precision=7, scale=2), nullable=True),
        sa.Column('loan_amount', sa.Numeric(precision=15, scale=2), nullable=True),
        sa.Column('reason', sa.Text(), nullable=True),
        sa.Column('timestamp', sa.DateTime(timezone=True), server_default=sa.text('now()'), nullable=False),
    )
    op.create_index('ix_decisions_request_id', 'decisions', ['request_id'], unique=True)
    op.create_index('ix_decisions_timestamp', 'decisions', ['timestamp'])

    # Seed default rules
    op.bulk_insert(
        rules,
        [
            {
                'id': uuid.uuid4(),
                'rule_name': 'MINIMUM_CREDIT_SCORE',
                'rule_type': 'CREDIT_SCORE',
                'description': 'Credit score must be at least 650',
                'threshold_value': 650,
                'operator': 'GTE',
                'enabled': True,
                'priority': 1,
                'importance': 'CRITICAL',
                'failure_message': 'Credit score below minimum threshold',
                'source': 'MANUAL',
            },
            {
                'id': uuid.uuid4(),
                'rule_name': 'MAXIMUM_LOAN_AMOUNT',
                'rule_type': 'LOAN_AMOUNT',
                'description': 'Loan amount must not exceed 1,000,000',
                'threshold_value': 1000000,
                'operator': 'LTE',
                'enabled': True,
                'priority': 2,
                'importance': 'CRITICAL',
                'failure_message': 'Loan amount exceeds maximum limit',
                'source': 'MANUAL',
            },
            {
                'id': uuid.uuid4(),
                'rule_name': 'BUREAU_RESPONSE_VALIDATION',
                'rule_type': 'BUREAU_RESPONSE',
                'description': 'At least one credit bureau must respond successfully',
                'threshold_value': 1,
                'operator': 'GTE',
                'enabled': True,
                'priority': 3,
                'importance': 'HIGH',
                'failure_message': 'No successful bureau responses received',
                'source': 'MANUAL',
            },
        ],
    )


def downgrade() -> None:
    op.drop_index('ix_decisions_timestamp', table_name='decisions')
    op.drop_index('ix_decisions_request_id', table_name='decisions')
    op.drop_table('decisions')

    op.drop_index('ix_rule_configurations_enabled', table_name='rule_configurations')
    op.drop_index('ix_rule_configurations_rule_name', table_name='rule_configurations')
    op.drop_table('rule_configurations')

    op.execute("DROP TYPE IF EXISTS decision_outcome")
    op.execute("DROP TYPE IF EXISTS rule_source")
    op.execute("DROP TYPE IF EXISTS rule_importance")
    op.execute("DROP TYPE IF EXISTS rule_operator")
    op.execute("DROP TYPE IF EXISTS rule_type")
