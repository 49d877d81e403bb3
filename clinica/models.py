from __future__ import annotations

import enum
from datetime import date, datetime
from typing import Any
from zoneinfo import ZoneInfo

from pydantic import BaseModel, ConfigDict, ValidationInfo, field_validator
from pydantic.alias_generators import to_camel

from .config import zona_local

NOME_SESSAO_PADRAO = "Sessão de Fisioterapia"


class StatusSessao(str, enum.Enum):
    AGENDADA = "AGENDADA"
    CONCLUIDA = "CONCLUIDA"
    CANCELADA = "CANCELADA"


ROTULOS_STATUS = {
    StatusSessao.AGENDADA: "Agendada",
    StatusSessao.CONCLUIDA: "Concluída",
    StatusSessao.CANCELADA: "Cancelada",
}


class ModeloApi(BaseModel):
    """Base dos modelos: nomes snake_case em Python, camelCase no JSON."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    def para_api(self) -> dict[str, Any]:
        return self.model_dump(by_alias=True, mode="json", exclude_none=True)


def _hora_local(dt: datetime, zona: ZoneInfo | None = None) -> datetime:
    # timestamps com fuso viram hora local "naive"
    if dt.tzinfo is None:
        return dt
    return dt.astimezone(zona or zona_local()).replace(tzinfo=None)


class Sessao(ModeloApi):
    id: int | None = None
    cliente_id: int
    nome: str = NOME_SESSAO_PADRAO
    data_hora_inicio: datetime
    data_hora_fim: datetime
    status: StatusSessao = StatusSessao.AGENDADA
    notas_sessao: str | None = None

    @field_validator("data_hora_inicio", "data_hora_fim")
    @classmethod
    def _normaliza_fuso(cls, v: datetime, info: ValidationInfo) -> datetime:
        # o fuso configurado chega pelo contexto de validação
        zona = (info.context or {}).get("zona")
        return _hora_local(v, zona)

    def __repr__(self) -> str:
        return f"Sessao({self.id}, cliente={self.cliente_id}, {self.data_hora_inicio:%Y-%m-%d %H:%M}, {self.status.value})"


class Cliente(ModeloApi):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, extra="allow")

    id: int
    nome: str
    email: str = ""
    telefone: str = ""
    sexo: str | None = None
    data_nascimento: date | None = None
    profissao: str | None = None
    bairro: str | None = None
    cidade: str | None = None
    data_cadastro: datetime | None = None

    @field_validator("email", "telefone", mode="before")
    @classmethod
    def _none_vazio(cls, v: Any) -> Any:
        return "" if v is None else v

    def __repr__(self) -> str:
        return f"Cliente({self.id}, {self.nome})"


class Avaliacao(ModeloApi):
    """Avaliação fisioterapêutica; os campos clínicos ficam como extras."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, extra="allow")

    id: int | None = None
    cliente_id: int
    data_avaliacao: date | None = None
    evolucoes: list[Any] = []
