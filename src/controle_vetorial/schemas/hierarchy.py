

from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, Field


class ProfileSummary(BaseModel):
    id: str
    full_name: str
    role: str

    class Config:
        from_attributes = True


class LocalidadeSupervisorPublic(BaseModel):
    id: str
    supervisor_area_id: str
    localidade: str
    created_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class SupervisorAreaPublic(BaseModel):
    id: str
    profile_id: str
    supervisor_geral_id: str
    nome: str
    profile: Optional[ProfileSummary] = None
    localidades: List[LocalidadeSupervisorPublic] = []

    class Config:
        from_attributes = True


class SupervisorGeralPublic(BaseModel):
    id: str
    profile_id: str
    nome: str
    profile: Optional[ProfileSummary] = None
    supervisores_area: List[SupervisorAreaPublic] = []

    class Config:
        from_attributes = True


class SupervisorGeralCreate(BaseModel):
    profile_id: str
    nome: str


class SupervisorAreaCreate(BaseModel):
    profile_id: str
    supervisor_geral_id: str
    nome: str
    localidades: List[str] = Field(default_factory=list)


class SupervisorAreaUpdate(BaseModel):
    supervisor_geral_id: Optional[str] = None
    nome: Optional[str] = None


class LocalidadesReplace(BaseModel):
    localidades: List[str]


class LocalidadeAdd(BaseModel):
    localidade: str


class AccessPublic(BaseModel):
    unrestricted: bool
    localities: List[str] = []
