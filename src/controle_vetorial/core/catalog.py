"""
Tabelas fixas do boletim de campo (categorias de depósito, semanas,
ciclos e localidades). O motor de consolidação recebe um
`ReportingCatalog` explícito; `DEFAULT_CATALOG` é o do município.
"""

from dataclasses import dataclass, field
from typing import Tuple

from controle_vetorial.core.config import settings


CONTAINER_CATEGORIES: Tuple[str, ...] = ("A1", "A2", "B", "C", "D1", "D2", "E")

PROPERTY_SUBTYPES: Tuple[str, ...] = ("residential", "commercial", "vacant_lot", "strategic_point", "other")

FIRST_WEEK = 1
LAST_WEEK = 52

# 1 = Bairro (BRR), 2 = Povoado (POV)
LOCALITY_CATEGORIES = {
    "1": "Brr",
    "2": "Pov",
}

LOCALIDADES = sorted([
    "Alemita", "Alto Maron", "Antique", "Bananeira", "Banco Raso", "California",
    "Carlos Silva", "Castalia", "Centro", "Centro Comercial", "Conceicao",
    "Corbiniano Freire", "Daniel Gomes", "Fatima", "Fernando Gomes", "Ferradas",
    "Fonseca", "Goes Calmon", "Horteiro", "Itamaraca", "Jacana", "Jardim Brasil",
    "Jardim Grapiuna", "Jardim Primavera", "Joao Soares", "Jorge Amado", "Lomanto",
    "Mangabinha", "Manoel Leão", "Maria Matos", "Maria Pinheiro", "Monte Cristo",
    "Mutuns", "N S das Gracas", "Nova California", "Nova Esperança", "Nova Ferradas",
    "Nova Itabuna", "Nova Fonseca", "Novo Horizonte", "Novo S Caetano", "Parque Boa Vista",
    "Parque Verde", "Pedro Geronimo", "Pontalzinho", "Roca do Povo", "Santa Catarina",
    "Santa Clara", "Santa Ines", "Santo Antonio", "Sao Caetano", "Sao Judas",
    "Sao Lourenço", "Sao Pedro", "Sao Roque", "Sarinha", "Sinval Palmeira",
    "Taverolandia", "Urbis IV", "Vila Analia", "Vila Paloma", "Zildolandia", "Zizo",
])


def week_label(number: int) -> str:
    return f"SE {number:02d}"


@dataclass(frozen=True)
class ReportingCatalog:
    container_categories: Tuple[str, ...] = CONTAINER_CATEGORIES
    first_week: int = FIRST_WEEK
    last_week: int = LAST_WEEK
    cycles: Tuple[int, ...] = field(default_factory=lambda: tuple(range(1, settings.CYCLE_COUNT + 1)))
    localities: Tuple[str, ...] = tuple(LOCALIDADES)

    @property
    def week_labels(self) -> list[str]:
        return [week_label(n) for n in range(self.first_week, self.last_week + 1)]


DEFAULT_CATALOG = ReportingCatalog()
