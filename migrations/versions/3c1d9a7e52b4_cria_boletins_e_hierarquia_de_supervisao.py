from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa



revision: str = '3c1d9a7e52b4'
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:


    op.create_table('profiles',
    sa.Column('id', sa.String(length=36), nullable=False),
    sa.Column('full_name', sa.String(length=255), nullable=False),
    sa.Column('role', sa.String(length=32), nullable=False, comment='admin | gestor | supervisor_geral | supervisor_area'),
    sa.PrimaryKeyConstraint('id')
    )
    op.create_table('reports',
    sa.Column('id', sa.String(length=36), nullable=False),
    sa.Column('user_id', sa.String(length=36), nullable=True),
    sa.Column('municipio', sa.String(length=100), nullable=True),
    sa.Column('localidade', sa.String(length=255), nullable=False),
    sa.Column('categoria_localidade', sa.String(length=10), nullable=False),
    sa.Column('semana_epidemiologica', sa.String(length=5), nullable=False, comment="Semana Epidemiológica (ex: 'SE 07')"),
    sa.Column('ciclo', sa.Integer(), nullable=False),
    sa.Column('ano', sa.Integer(), nullable=False),
    sa.Column('data_inicio', sa.Date(), nullable=True),
    sa.Column('data_fim', sa.Date(), nullable=True),
    sa.Column('concluido', sa.Boolean(), nullable=False),
    sa.Column('content', sa.JSON(), nullable=False, comment='Contagens do boletim (imóveis, depósitos, larvicidas...)'),
    sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.text('now()'), nullable=False),
    sa.Column('updated_at', sa.DateTime(timezone=True), nullable=True),
    sa.ForeignKeyConstraint(['user_id'], ['profiles.id'], ondelete='SET NULL'),
    sa.PrimaryKeyConstraint('id')
    )
    op.create_index('idx_report_se_ciclo', 'reports', ['semana_epidemiologica', 'ciclo'], unique=False)
    op.create_index(op.f('ix_reports_ciclo'), 'reports', ['ciclo'], unique=False)
    op.create_index(op.f('ix_reports_localidade'), 'reports', ['localidade'], unique=False)
    op.create_index(op.f('ix_reports_semana_epidemiologica'), 'reports', ['semana_epidemiologica'], unique=False)
    op.create_table('supervisores_gerais',
    sa.Column('id', sa.String(length=36), nullable=False),
    sa.Column('profile_id', sa.String(length=36), nullable=False),
    sa.Column('nome', sa.String(length=255), nullable=False),
    sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.text('now()'), nullable=False),
    sa.Column('updated_at', sa.DateTime(timezone=True), nullable=True),
    sa.ForeignKeyConstraint(['profile_id'], ['profiles.id'], ondelete='CASCADE'),
    sa.PrimaryKeyConstraint('id'),
    sa.UniqueConstraint('profile_id')
    )
    op.create_table('supervisores_area',
    sa.Column('id', sa.String(length=36), nullable=False),
    sa.Column('profile_id', sa.String(length=36), nullable=False),
    sa.Column('supervisor_geral_id', sa.String(length=36), nullable=False),
    sa.Column('nome', sa.String(length=255), nullable=False),
    sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.text('now()'), nullable=False),
    sa.Column('updated_at', sa.DateTime(timezone=True), nullable=True),
    sa.ForeignKeyConstraint(['profile_id'], ['profiles.id'], ondelete='CASCADE'),
    sa.ForeignKeyConstraint(['supervisor_geral_id'], ['supervisores_gerais.id'], ondelete='CASCADE'),
    sa.PrimaryKeyConstraint('id'),
    sa.UniqueConstraint('profile_id')
    )
    op.create_index(op.f('ix_supervisores_area_supervisor_geral_id'), 'supervisores_area', ['supervisor_geral_id'], unique=False)
    op.create_table('localidades_supervisor',
    sa.Column('id', sa.String(length=36), nullable=False),
    sa.Column('supervisor_area_id', sa.String(length=36), nullable=False),
    sa.Column('localidade', sa.String(length=255), nullable=False),
    sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.text('now()'), nullable=False),
    sa.ForeignKeyConstraint(['supervisor_area_id'], ['supervisores_area.id'], ondelete='CASCADE'),
    sa.PrimaryKeyConstraint('id'),
    sa.UniqueConstraint('supervisor_area_id', 'localidade', name='uq_supervisor_localidade')
    )
    op.create_index(op.f('ix_localidades_supervisor_supervisor_area_id'), 'localidades_supervisor', ['supervisor_area_id'], unique=False)



def downgrade() -> None:


    op.drop_index(op.f('ix_localidades_supervisor_supervisor_area_id'), table_name='localidades_supervisor')
    op.drop_table('localidades_supervisor')
    op.drop_index(op.f('ix_supervisores_area_supervisor_geral_id'), table_name='supervisores_area')
    op.drop_table('supervisores_area')
    op.drop_table('supervisores_gerais')
    op.drop_index(op.f('ix_reports_semana_epidemiologica'), table_name='reports')
    op.drop_index(op.f('ix_reports_localidade'), table_name='reports')
    op.drop_index(op.f('ix_reports_ciclo'), table_name='reports')
    op.drop_index('idx_report_se_ciclo', table_name='reports')
    op.drop_table('reports')
    op.drop_table('profiles')
