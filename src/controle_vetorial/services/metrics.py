"""
Fórmulas compartilhadas pelo motor de consolidação.

Todas as funções toleram blocos ausentes do boletim (contribuição zero)
e nunca dividem por zero.
"""

import math
import re
import unicodedata
from typing import Iterable, Optional

from controle_vetorial.core.catalog import CONTAINER_CATEGORIES, PROPERTY_SUBTYPES
from controle_vetorial.schemas.reports import Depositos, Imoveis, Larvicida, ReportPayload, Tratamentos


_WEEK_NUMBER_RE = re.compile(r"^SE (\d{1,2})")
_CYCLE_NUMBER_RE = re.compile(r"(\d+)$")

_EMPTY_IMOVEIS = Imoveis()
_EMPTY_DEPOSITOS = Depositos()
_EMPTY_TRATAMENTOS = Tratamentos()
_EMPTY_LARVICIDA = Larvicida()


def round_half_up(value: float) -> int:
    # arredonda .5 para cima, inclusive em negativos (-2.5 -> -2)
    return int(math.floor(value + 0.5))


def round2(value: float) -> float:
    return round_half_up(value * 100) / 100


def pendency_rate(closed: int, recovered: int, informed: int) -> float:
    """(fechados - recuperados) * 100 / informados, 0 quando não há informados."""
    if informed <= 0:
        return 0.0
    return round2((closed - recovered) * 100 / informed)


def percent_complete(completed: int, total: int) -> int:
    if total <= 0:
        return 0
    return round_half_up(completed * 100 / total)


def imoveis_of(payload: Optional[ReportPayload]) -> Imoveis:
    if payload is None or payload.imoveis is None:
        return _EMPTY_IMOVEIS
    return payload.imoveis


def depositos_of(payload: Optional[ReportPayload]) -> Depositos:
    if payload is None or payload.depositos is None:
        return _EMPTY_DEPOSITOS
    return payload.depositos


def tratamentos_of(payload: Optional[ReportPayload]) -> Tratamentos:
    if payload is None or payload.tratamentos is None:
        return _EMPTY_TRATAMENTOS
    return payload.tratamentos


def larvicidas_of(payload: Optional[ReportPayload]) -> tuple[Larvicida, Larvicida]:
    if payload is None:
        return _EMPTY_LARVICIDA, _EMPTY_LARVICIDA
    return payload.larvicida1 or _EMPTY_LARVICIDA, payload.larvicida2 or _EMPTY_LARVICIDA


def total_properties(payload: Optional[ReportPayload]) -> int:
    """Imóveis trabalhados: soma dos cinco tipos de imóvel."""
    imoveis = imoveis_of(payload)
    return sum(getattr(imoveis, subtype) for subtype in PROPERTY_SUBTYPES)


def total_containers(payload: Optional[ReportPayload], categories: Iterable[str] = CONTAINER_CATEGORIES) -> int:
    depositos = depositos_of(payload)
    return sum(getattr(depositos, category, 0) for category in categories)


def larvicide_quantity(payload: Optional[ReportPayload]) -> float:
    first, second = larvicidas_of(payload)
    return first.quantity + second.quantity


def larvicide_containers_treated(payload: Optional[ReportPayload]) -> int:
    first, second = larvicidas_of(payload)
    return first.containers_treated + second.containers_treated


def eliminated_of(payload: Optional[ReportPayload]) -> int:
    return payload.eliminated if payload is not None else 0


def agents_of(payload: Optional[ReportPayload]) -> int:
    return payload.agents if payload is not None else 0


def parse_week_number(label: Optional[str]) -> Optional[int]:
    """'SE 07' -> 7. Retorna None para rótulos fora do padrão."""
    if not label:
        return None
    match = _WEEK_NUMBER_RE.match(label)
    return int(match.group(1)) if match else None


def parse_cycle_number(key) -> Optional[int]:
    """Aceita o número do ciclo ou chaves como 'ciclo-3'."""
    if isinstance(key, int):
        return key
    match = _CYCLE_NUMBER_RE.search(str(key or ""))
    return int(match.group(1)) if match else None


def numeric_sort_key(number: Optional[int]) -> tuple[int, int]:
    # rótulos sem número vão para o fim
    return (1, 0) if number is None else (0, number)


def label_sort_key(label: str) -> tuple[str, str]:
    """Ordem alfabética sem distinguir acentos e maiúsculas ('Água' junto de 'agua')."""
    decomposed = unicodedata.normalize("NFKD", label or "")
    folded = "".join(char for char in decomposed if not unicodedata.combining(char)).casefold()
    return folded, label or ""
