"""
Parser do id do cliente nas respostas do backend.

Versões diferentes do backend devolvem o dono de uma sessão (ou avaliação)
em três formatos. A ordem de tentativa é:

1. ``clienteId``            -> formato atual
2. ``cliente_id``           -> legado
3. ``cliente: {"id": ...}`` -> legado (entidade aninhada)

Os dois formatos legados são apenas compatibilidade de migração e devem
sumir quando todos os backends devolverem ``clienteId``.
"""
from __future__ import annotations

import logging
from typing import Any, Callable, TypeVar
from zoneinfo import ZoneInfo

from pydantic import ValidationError

from .errors import ErroFormatoResposta
from .models import Avaliacao, Sessao

logger = logging.getLogger(__name__)

M = TypeVar("M", Sessao, Avaliacao)


def _aninhado(raw: dict[str, Any]) -> Any:
    cliente = raw.get("cliente")
    if isinstance(cliente, dict):
        return cliente.get("id")
    return None


_FORMATOS: list[tuple[str, Callable[[dict[str, Any]], Any]]] = [
    ("clienteId", lambda raw: raw.get("clienteId")),
    ("cliente_id", lambda raw: raw.get("cliente_id")),
    ("cliente.id", _aninhado),
]


def _como_int(valor: Any, formato: str) -> int:
    if isinstance(valor, bool):
        raise ErroFormatoResposta(f"Id do cliente inválido em '{formato}': {valor!r}")
    if isinstance(valor, int):
        return valor
    # isdecimal: "²" passa em isdigit mas int() recusa
    if isinstance(valor, str) and valor.strip().isdecimal():
        try:
            return int(valor.strip())
        except ValueError:
            pass
    raise ErroFormatoResposta(f"Id do cliente inválido em '{formato}': {valor!r}")


def extrai_cliente_id(raw: Any) -> int:
    """Id do cliente segundo a ordem documentada no módulo."""
    if not isinstance(raw, dict):
        raise ErroFormatoResposta(f"Esperado um objeto JSON, recebido {type(raw).__name__}")

    for formato, leitor in _FORMATOS:
        valor = leitor(raw)
        if valor is None:
            continue
        if formato != "clienteId":
            logger.debug("Id do cliente no formato legado '%s' (registro %s)", formato, raw.get("id"))
        return _como_int(valor, formato)

    raise ErroFormatoResposta(
        f"Id do cliente ausente: esperado um de {[f for f, _ in _FORMATOS]}, chaves recebidas {sorted(raw)}"
    )


def _normaliza(modelo: type[M], raw: Any, zona: ZoneInfo | None = None) -> M:
    cliente_id = extrai_cliente_id(raw)
    dados = {k: v for k, v in raw.items() if k not in ("cliente_id", "cliente")}
    dados["clienteId"] = cliente_id
    try:
        return modelo.model_validate(dados, context={"zona": zona})
    except ValidationError as e:
        raise ErroFormatoResposta(f"{modelo.__name__} inválida na resposta: {e}") from e


def normaliza_sessao(raw: Any, zona: ZoneInfo | None = None) -> Sessao:
    """Sessão da resposta; horários com fuso vão para ``zona`` (padrão: TZ_CLINICA)."""
    return _normaliza(Sessao, raw, zona)


def normaliza_avaliacao(raw: Any) -> Avaliacao:
    return _normaliza(Avaliacao, raw)
