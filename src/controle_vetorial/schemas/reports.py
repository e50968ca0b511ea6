import re
from datetime import date, datetime
from typing import Dict, List, Optional, get_origin

from pydantic import BaseModel, ConfigDict, Field, field_validator

from controle_vetorial.core.catalog import FIRST_WEEK, LAST_WEEK, LOCALITY_CATEGORIES


WEEK_LABEL_RE = re.compile(r"^SE (\d{2})$")

_EMPTY_BY_TYPE = {int: 0, float: 0, str: ""}


class CountsModel(BaseModel):
    """
    Base dos blocos de contagem do boletim. As chaves gravadas seguem o
    formulário de campo (aliases); contagens nulas valem zero, textos
    nulos viram "" e listas nulas viram [].
    """
    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    @field_validator("*", mode="before")
    @classmethod
    def _none_as_empty(cls, value, info):
        if value is not None:
            return value
        annotation = cls.model_fields[info.field_name].annotation
        if annotation in _EMPTY_BY_TYPE:
            return _EMPTY_BY_TYPE[annotation]
        if get_origin(annotation) is list:
            return []
        return value


class Imoveis(CountsModel):
    residential: int = Field(0, ge=0, alias="residencias")
    commercial: int = Field(0, ge=0, alias="comercios")
    vacant_lot: int = Field(0, ge=0, alias="terrenos")
    strategic_point: int = Field(0, ge=0, alias="pontos")
    other: int = Field(0, ge=0, alias="outros")
    samples: int = Field(0, ge=0, alias="amostras")
    closed: int = Field(0, ge=0, alias="fechados")
    refused: int = Field(0, ge=0, alias="recusas")
    recovered: int = Field(0, ge=0, alias="recuperados")
    informed: int = Field(0, ge=0, alias="informados")


class Tratamentos(CountsModel):
    inspected: int = Field(0, ge=0, alias="inspecionados")
    focal: int = Field(0, ge=0, alias="focal")
    perifocal: int = Field(0, ge=0, alias="perifocal")


class Depositos(CountsModel):
    A1: int = Field(0, ge=0)
    A2: int = Field(0, ge=0)
    B: int = Field(0, ge=0)
    C: int = Field(0, ge=0)
    D1: int = Field(0, ge=0)
    D2: int = Field(0, ge=0)
    E: int = Field(0, ge=0)


class Larvicida(CountsModel):
    tipo: str = ""
    quantity: float = Field(0, ge=0, alias="quantidade", description="Quantidade em gramas")
    containers_treated: int = Field(0, ge=0, alias="dep tratados")


class Adulticida(CountsModel):
    tipo: str = ""
    loads: int = Field(0, ge=0, alias="cargas")


class ReportPayload(CountsModel):
    """Conteúdo aninhado do boletim (coluna `content`)."""
    tipo_atividade: List[str] = Field(default_factory=list, alias="tipoAtividade")
    imoveis: Optional[Imoveis] = None
    tratamentos: Optional[Tratamentos] = None
    depositos: Optional[Depositos] = None
    eliminated: int = Field(0, ge=0, alias="eliminados")
    larvicida1: Optional[Larvicida] = None
    larvicida2: Optional[Larvicida] = None
    adulticida: Optional[Adulticida] = None
    agents: int = Field(0, ge=0, alias="agentes")
    supervisors: int = Field(0, ge=0, alias="supervisores")
    supervisor_name: str = Field("", alias="nomeSupervisor")
    days_worked: int = Field(0, ge=0, alias="diasTrabalhados")
    vehicles: int = Field(0, ge=0, alias="veiculos")

    @field_validator("vehicles", mode="before")
    @classmethod
    def _blank_vehicles(cls, value):
        # o formulário envia string vazia quando não há veículo
        if value in ("", None):
            return 0
        return value


class ReportBase(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    municipio: Optional[str] = None
    localidade: str
    categoria_localidade: str = ""
    semana_epidemiologica: str = Field(..., description="Semana Epidemiológica (ex: 'SE 07')")
    ciclo: int = Field(..., ge=1)
    ano: int
    data_inicio: Optional[date] = None
    data_fim: Optional[date] = None
    concluido: bool = False


class ReportCreate(ReportBase):
    data: ReportPayload = Field(default_factory=ReportPayload)

    @field_validator("semana_epidemiologica")
    @classmethod
    def _check_week(cls, value: str) -> str:
        match = WEEK_LABEL_RE.match(value)
        if not match or not FIRST_WEEK <= int(match.group(1)) <= LAST_WEEK:
            raise ValueError("semana_epidemiologica deve estar entre 'SE 01' e 'SE 52'")
        return value

    @field_validator("categoria_localidade")
    @classmethod
    def _check_category(cls, value: str) -> str:
        # vazio = categoria não informada no formulário
        if value and value not in LOCALITY_CATEGORIES:
            raise ValueError(f"categoria_localidade deve ser uma de {sorted(LOCALITY_CATEGORIES)}")
        return value


class ReportPublic(ReportBase):
    id: str
    user_id: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
    data: ReportPayload = Field(default_factory=ReportPayload)


class ConsolidatedTotals(BaseModel):
    total_properties: int = 0
    total_closed: int = 0
    total_recovered: int = 0
    total_informed: int = 0
    total_samples: int = 0
    total_refused: int = 0
    pendency_rate: float = 0.0
    total_containers: int = 0
    containers_by_category: Dict[str, int] = Field(default_factory=dict)
    total_eliminated: int = 0
    total_agents: int = 0
    total_days_worked: int = 0
    total_inspected: int = 0
    total_focal: int = 0
    total_perifocal: int = 0
    larvicide_quantity: float = 0.0
    larvicide_containers_treated: int = 0
    report_count: int = 0
    completed_count: int = 0


class WeekRow(BaseModel):
    week: str
    properties: int = 0
    containers: int = 0
    eliminated: int = 0
    agents: int = 0
    reports: int = 0


class RankedLocalityRow(BaseModel):
    rank: int
    locality: str
    eliminated: int = 0
    containers: int = 0
    properties: int = 0
    agents: int = 0
    closed: int = 0
    recovered: int = 0
    informed: int = 0
    pendency_rate: float = 0.0


class GroupedRow(BaseModel):
    key: str
    label: str
    properties: int = 0
    closed: int = 0
    recovered: int = 0
    informed: int = 0
    pendency_rate: float = 0.0
    larvicide_load: float = 0.0
    reports: int = 0
    completed: int = 0
    percent_complete: int = 0


class GroupedTable(BaseModel):
    rows: List[GroupedRow]
    totals: GroupedRow


class ReportsSummary(BaseModel):
    total: int
    completed: int
    open: int
    latest_week: Optional[str] = None
    most_frequent_locality: Optional[str] = None


class FilterOptions(BaseModel):
    weeks: List[str]
    localities: List[str]
    cycles: List[int]
