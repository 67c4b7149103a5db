"""Initial schema - project metadata store

Revision ID: 0001
Revises: 
Create Date: 2026-10-18

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision: str = '0001'
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    # Projects table (current-version pointer lives in "version")
    op.create_table(
        'projects',
        sa.Column('id', sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column('name', sa.String(64), nullable=False),
        sa.Column('description', sa.String(2048), nullable=False, server_default=''),
        sa.Column('active', sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column('version', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('last_version', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('settings', sa.JSON(), nullable=True),
        sa.Column('created_by', sa.String(64), nullable=False),
        sa.Column('last_modified_by', sa.String(64), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
    )
    op.create_index('ix_projects_name', 'projects', ['name'])
    op.create_index(
        'uq_projects_active_name',
        'projects',
        ['name'],
        unique=True,
        sqlite_where=sa.text('active = 1'),
        postgresql_where=sa.text('active'),
    )

    # Project versions table
    op.create_table(
        'project_versions',
        sa.Column('project_id', sa.Integer(), sa.ForeignKey('projects.id'), primary_key=True),
        sa.Column('version', sa.Integer(), primary_key=True),
        sa.Column('uploader', sa.String(64), nullable=False),
        sa.Column('upload_time', sa.DateTime(timezone=True), nullable=False),
        sa.Column('md5', sa.LargeBinary(16), nullable=True),
        sa.Column('resource_id', sa.String(512), nullable=True),
        sa.Column('file_type', sa.String(16), nullable=True),
        sa.Column('file_name', sa.String(256), nullable=True),
        sa.Column('file_size', sa.BigInteger(), nullable=True),
        sa.Column('local_file', sa.String(1024), nullable=True),
        sa.Column('uploaded_at', sa.DateTime(timezone=True), nullable=True),
    )

    # Project permissions table
    op.create_table(
        'project_permissions',
        sa.Column('project_id', sa.Integer(), sa.ForeignKey('projects.id'), primary_key=True),
        sa.Column('principal', sa.String(64), primary_key=True),
        sa.Column('is_group', sa.Boolean(), primary_key=True),
        sa.Column('permissions', sa.Integer(), nullable=False),
        sa.Column('modified_at', sa.DateTime(timezone=True), nullable=False),
    )

    # Project properties table
    op.create_table(
        'project_properties',
        sa.Column('project_id', sa.Integer(), sa.ForeignKey('projects.id'), primary_key=True),
        sa.Column('version', sa.Integer(), primary_key=True),
        sa.Column('path_name', sa.String(512), primary_key=True),
        sa.Column('entries', sa.JSON(), nullable=False),
        sa.Column('modified_at', sa.DateTime(timezone=True), nullable=False),
    )

    # Project flows table
    op.create_table(
        'project_flows',
        sa.Column('project_id', sa.Integer(), sa.ForeignKey('projects.id'), primary_key=True),
        sa.Column('version', sa.Integer(), primary_key=True),
        sa.Column('flow_id', sa.String(128), primary_key=True),
        sa.Column('graph', sa.JSON(), nullable=False),
        sa.Column('modified_at', sa.DateTime(timezone=True), nullable=False),
    )

    # Project events table (append-only)
    op.create_table(
        'project_events',
        sa.Column('id', sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column('project_id', sa.Integer(), nullable=False),
        sa.Column('event_type', sa.String(50), nullable=False),
        sa.Column('username', sa.String(64), nullable=False),
        sa.Column('message', sa.Text(), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False),
    )
    op.create_index('ix_project_events_project_time', 'project_events', ['project_id', 'created_at', 'id'])


def downgrade() -> None:
    op.drop_table('project_events')
    op.drop_table('project_flows')
    op.drop_table('project_properties')
    op.drop_table('project_permissions')
    op.drop_table('project_versions')
    op.drop_index('uq_projects_active_name', table_name='projects')
    op.drop_index('ix_projects_name', table_name='projects')
    op.drop_table('projects')
