import datetime
import uuid
from sqlalchemy import (
    Integer, String, DateTime, Index, Boolean, Date, JSON
)
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column, relationship
from sqlalchemy.sql import func
from sqlalchemy.schema import UniqueConstraint, ForeignKey
from typing import List, Optional


def _utcnow() -> datetime.datetime:
    return datetime.datetime.now(datetime.timezone.utc)


def _new_id() -> str:
    return str(uuid.uuid4())


class Base(DeclarativeBase):
    pass

class Profile(Base):

    __tablename__ = "profiles"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=_new_id)
    full_name: Mapped[str] = mapped_column(String(255), nullable=False)
    role: Mapped[str] = mapped_column(String(32), nullable=False, default="gestor",
                                      comment="admin | gestor | supervisor_geral | supervisor_area")


class Report(Base):

    __tablename__ = "reports"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=_new_id)
    user_id: Mapped[Optional[str]] = mapped_column(String(36), ForeignKey("profiles.id", ondelete="SET NULL"),
                                                   nullable=True)

    municipio: Mapped[Optional[str]] = mapped_column(String(100), nullable=True)
    localidade: Mapped[str] = mapped_column(String(255), nullable=False, index=True)
    categoria_localidade: Mapped[str] = mapped_column(String(10), nullable=False, default="")

    semana_epidemiologica: Mapped[str] = mapped_column(String(5), nullable=False, index=True,
                                                       comment="Semana Epidemiológica (ex: 'SE 07')")
    ciclo: Mapped[int] = mapped_column(Integer, nullable=False, index=True)
    ano: Mapped[int] = mapped_column(Integer, nullable=False)
    data_inicio: Mapped[Optional[datetime.date]] = mapped_column(Date, nullable=True)
    data_fim: Mapped[Optional[datetime.date]] = mapped_column(Date, nullable=True)

    concluido: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)

    content: Mapped[dict] = mapped_column(JSON, nullable=False, default=dict,
                                          comment="Contagens do boletim (imóveis, depósitos, larvicidas...)")

    created_at: Mapped[datetime.datetime] = mapped_column(
        DateTime(timezone=True), default=_utcnow, server_default=func.now()
    )
    updated_at: Mapped[Optional[datetime.datetime]] = mapped_column(DateTime(timezone=True), nullable=True)

    __table_args__ = (
        Index("idx_report_se_ciclo", "semana_epidemiologica", "ciclo"),
    )


class SupervisorGeral(Base):

    __tablename__ = "supervisores_gerais"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=_new_id)
    profile_id: Mapped[str] = mapped_column(String(36), ForeignKey("profiles.id", ondelete="CASCADE"),
                                            nullable=False, unique=True)
    nome: Mapped[str] = mapped_column(String(255), nullable=False)
    created_at: Mapped[datetime.datetime] = mapped_column(DateTime(timezone=True), default=_utcnow, server_default=func.now())
    updated_at: Mapped[Optional[datetime.datetime]] = mapped_column(DateTime(timezone=True), nullable=True)

    profile: Mapped["Profile"] = relationship()
    supervisores_area: Mapped[List["SupervisorArea"]] = relationship(
        back_populates="supervisor_geral", cascade="all, delete-orphan", order_by="SupervisorArea.nome"
    )


class SupervisorArea(Base):

    __tablename__ = "supervisores_area"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=_new_id)
    profile_id: Mapped[str] = mapped_column(String(36), ForeignKey("profiles.id", ondelete="CASCADE"),
                                            nullable=False, unique=True)
    supervisor_geral_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("supervisores_gerais.id", ondelete="CASCADE"), nullable=False, index=True
    )
    nome: Mapped[str] = mapped_column(String(255), nullable=False)
    created_at: Mapped[datetime.datetime] = mapped_column(DateTime(timezone=True), default=_utcnow, server_default=func.now())
    updated_at: Mapped[Optional[datetime.datetime]] = mapped_column(DateTime(timezone=True), nullable=True)

    profile: Mapped["Profile"] = relationship()
    supervisor_geral: Mapped["SupervisorGeral"] = relationship(back_populates="supervisores_area")
    localidades: Mapped[List["LocalidadeSupervisor"]] = relationship(
        back_populates="supervisor_area", cascade="all, delete-orphan", order_by="LocalidadeSupervisor.localidade"
    )


class LocalidadeSupervisor(Base):

    __tablename__ = "localidades_supervisor"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=_new_id)
    supervisor_area_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("supervisores_area.id", ondelete="CASCADE"), nullable=False, index=True
    )
    # nome simples; a mesma localidade pode aparecer em mais de um supervisor
    localidade: Mapped[str] = mapped_column(String(255), nullable=False)
    created_at: Mapped[datetime.datetime] = mapped_column(DateTime(timezone=True), default=_utcnow, server_default=func.now())

    supervisor_area: Mapped["SupervisorArea"] = relationship(back_populates="localidades")

    __table_args__ = (
        UniqueConstraint("supervisor_area_id", "localidade", name="uq_supervisor_localidade"),
    )
