from __future__ import annotations

import enum
from dataclasses import dataclass
from datetime import date, datetime, timedelta
from typing import Iterable
from zoneinfo import ZoneInfo

from .config import zona_local
from .models import ROTULOS_STATUS, Cliente, Sessao, StatusSessao

DIAS_SEMANA = ["segunda-feira", "terça-feira", "quarta-feira", "quinta-feira", "sexta-feira", "sábado", "domingo"]
MESES = [
    "janeiro", "fevereiro", "março", "abril", "maio", "junho",
    "julho", "agosto", "setembro", "outubro", "novembro", "dezembro",
]


class FiltroPeriodo(enum.Enum):
    TODOS = "todos"
    HOJE = "hoje"
    SEMANA = "semana"
    MES = "mes"


ROTULOS_FILTRO = {
    FiltroPeriodo.HOJE: "Hoje",
    FiltroPeriodo.SEMANA: "Semana",
    FiltroPeriodo.MES: "Mês",
    FiltroPeriodo.TODOS: "Todos",
}


# =========================
# Janelas de tempo
# =========================
def agora_local(zona: ZoneInfo | None = None) -> datetime:
    """Hora atual no fuso da clínica, sem tzinfo (mesma base das sessões)."""
    return datetime.now(zona or zona_local()).replace(tzinfo=None)


def inicio_semana(d: date) -> date:
    """Domingo da semana de ``d`` (a semana da agenda começa no domingo)."""
    # weekday(): segunda=0 ... domingo=6
    return d - timedelta(days=(d.weekday() + 1) % 7)


def _na_janela(dia: date, filtro: FiltroPeriodo, hoje: date) -> bool:
    if filtro is FiltroPeriodo.HOJE:
        return dia == hoje
    if filtro is FiltroPeriodo.SEMANA:
        domingo = inicio_semana(hoje)
        return domingo <= dia < domingo + timedelta(days=7)
    if filtro is FiltroPeriodo.MES:
        return (dia.year, dia.month) == (hoje.year, hoje.month)
    return True


# =========================
# Filtro -> agrupamento -> rótulo
# =========================
def filtra_sessoes(sessoes: Iterable[Sessao], filtro: FiltroPeriodo, agora: datetime) -> list[Sessao]:
    """Subsequência das sessões cujo início cai no período; mantém a ordem original."""
    hoje = agora.date()
    return [s for s in sessoes if _na_janela(s.data_hora_inicio.date(), filtro, hoje)]


def agrupa_por_dia(sessoes: Iterable[Sessao]) -> dict[date, list[Sessao]]:
    """
    Agrupa por data de início.
    - ordena por início (sort estável: empates mantêm a ordem de entrada)
    - as chaves saem em ordem cronológica
    - nenhum grupo vazio
    """
    grupos: dict[date, list[Sessao]] = {}
    for s in sorted(sessoes, key=lambda s: s.data_hora_inicio):
        grupos.setdefault(s.data_hora_inicio.date(), []).append(s)
    return grupos


def data_por_extenso(dia: date) -> str:
    return f"{DIAS_SEMANA[dia.weekday()]}, {dia.day:02d} de {MESES[dia.month - 1]}"


def rotulo_dia(dia: date | datetime, hoje: date) -> str:
    if isinstance(dia, datetime):
        dia = dia.date()
    if dia == hoje:
        return "Hoje"
    if dia == hoje + timedelta(days=1):
        return "Amanhã"
    return data_por_extenso(dia)


def agenda(sessoes: Iterable[Sessao], filtro: FiltroPeriodo, agora: datetime) -> list[tuple[str, list[Sessao]]]:
    """Pipeline completo da tela de agendamentos: [(rótulo, sessões do dia), ...]."""
    grupos = agrupa_por_dia(filtra_sessoes(sessoes, filtro, agora))
    return [(rotulo_dia(dia, agora.date()), itens) for dia, itens in grupos.items()]


# =========================
# Dashboard
# =========================
@dataclass(frozen=True)
class ResumoDashboard:
    total_clientes: int
    sessoes_hoje: list[Sessao]
    proximas: int
    este_mes: int


def sessoes_do_dia(sessoes: Iterable[Sessao], agora: datetime) -> list[Sessao]:
    return sorted(filtra_sessoes(sessoes, FiltroPeriodo.HOJE, agora), key=lambda s: s.data_hora_inicio)


def resumo_dashboard(sessoes: list[Sessao], clientes: list[Cliente], agora: datetime) -> ResumoDashboard:
    proximas = [s for s in sessoes if s.data_hora_inicio >= agora and s.status is StatusSessao.AGENDADA]
    return ResumoDashboard(
        total_clientes=len(clientes),
        sessoes_hoje=sessoes_do_dia(sessoes, agora),
        proximas=len(proximas),
        este_mes=len(filtra_sessoes(sessoes, FiltroPeriodo.MES, agora)),
    )


def saudacao(agora: datetime) -> str:
    if agora.hour < 12:
        return "Bom dia"
    if agora.hour < 18:
        return "Boa tarde"
    return "Boa noite"


def rotulo_status(status: StatusSessao | str) -> str:
    try:
        return ROTULOS_STATUS[StatusSessao(status)]
    except ValueError:
        return "Outro"
