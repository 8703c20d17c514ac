# backend/alembic/versions/001_initial_migration.py
"""Initial migration

Revision ID: 001
Revises:
Create Date: 2026-10-19 00:00:00.000000

"""
from alembic import op
import sqlalchemy as sa

# revision identifiers
revision = '001'
down_revision = None
branch_labels = None
depends_on = None


def _timestamps():
    return [
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=False),
    ]


def upgrade() -> None:
    # Create repositories table
    op.create_table(
        'repositories',
        sa.Column('id', sa.Uuid(), primary_key=True, index=True),
        sa.Column('name', sa.String(255), nullable=False),
        sa.Column('full_name', sa.String(500), nullable=False, unique=True, index=True),
        sa.Column('url', sa.String(1000)),
        sa.Column('provider', sa.String(50), nullable=False, server_default=sa.text("'github'")),
        sa.Column('default_branch', sa.String(255)),
        sa.Column('status', sa.String(10), index=True),
        sa.Column('last_analyzed', sa.DateTime(timezone=True)),
        *_timestamps(),
        sa.CheckConstraint(
            "status IS NULL OR status IN ('green', 'yellow', 'red')",
            name='repositories_status_check',
        ),
    )

    # Create dependencies table
    op.create_table(
        'dependencies',
        sa.Column('id', sa.Uuid(), primary_key=True, index=True),
        sa.Column('repository_id', sa.Uuid(), sa.ForeignKey('repositories.id', ondelete='CASCADE'), nullable=False, index=True),
        sa.Column('package_name', sa.String(255), nullable=False, index=True),
        sa.Column('current_version', sa.String(100), nullable=False),
        sa.Column('latest_version', sa.String(100), nullable=False),
        sa.Column('recommended_version', sa.String(100), nullable=False),
        sa.Column('vulnerabilities', sa.Integer, nullable=False, server_default=sa.text("0")),
        *_timestamps(),
    )

    # Create audit_results table
    op.create_table(
        'audit_results',
        sa.Column('id', sa.Uuid(), primary_key=True, index=True),
        sa.Column('repository_id', sa.Uuid(), sa.ForeignKey('repositories.id', ondelete='CASCADE'), nullable=False, index=True),
        sa.Column('severity', sa.String(20), nullable=False),
        sa.Column('count', sa.Integer, nullable=False, server_default=sa.text("0")),
        sa.Column('timestamp', sa.DateTime(timezone=True), nullable=False, index=True),
        *_timestamps(),
        sa.CheckConstraint(
            "severity IN ('info', 'low', 'moderate', 'high', 'critical')",
            name='audit_results_severity_check',
        ),
    )

    # Create security_advisories table
    op.create_table(
        'security_advisories',
        sa.Column('id', sa.Uuid(), primary_key=True, index=True),
        sa.Column('audit_result_id', sa.Uuid(), sa.ForeignKey('audit_results.id', ondelete='CASCADE'), nullable=False, index=True),
        sa.Column('package_name', sa.String(255), nullable=False, index=True),
        sa.Column('advisory_id', sa.String(100), nullable=False),
        sa.Column('title', sa.String(500)),
        sa.Column('severity', sa.String(20)),
        sa.Column('vulnerable_versions', sa.String(255)),
        sa.Column('recommendation', sa.Text),
        sa.Column('url', sa.String(1000)),
        sa.Column('cves', sa.JSON, nullable=False),
        sa.Column('cvss_score', sa.Float, nullable=False, server_default=sa.text("0")),
        *_timestamps(),
    )

    # Create advisory_findings table
    op.create_table(
        'advisory_findings',
        sa.Column('id', sa.Uuid(), primary_key=True, index=True),
        sa.Column('advisory_id', sa.Uuid(), sa.ForeignKey('security_advisories.id', ondelete='CASCADE'), nullable=False, index=True),
        sa.Column('version', sa.String(100)),
        sa.Column('paths', sa.JSON, nullable=False),
        *_timestamps(),
    )

    # Create advisory_actions table
    op.create_table(
        'advisory_actions',
        sa.Column('id', sa.Uuid(), primary_key=True, index=True),
        sa.Column('advisory_id', sa.Uuid(), sa.ForeignKey('security_advisories.id', ondelete='CASCADE'), nullable=False, index=True),
        sa.Column('action', sa.String(50)),
        sa.Column('module', sa.String(255)),
        sa.Column('target', sa.String(100)),
        sa.Column('is_major', sa.Boolean, nullable=False, server_default=sa.false()),
        sa.Column('resolves', sa.JSON, nullable=False),
        *_timestamps(),
    )


def downgrade() -> None:
    op.drop_table('advisory_actions')
    op.drop_table('advisory_findings')
    op.drop_table('security_advisories')
    op.drop_table('audit_results')
    op.drop_table('dependencies')
    op.drop_table('repositories')
