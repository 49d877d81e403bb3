from __future__ import annotations

import re
from datetime import date
from typing import Iterable

from .models import Cliente

CLIENTE_DESCONHECIDO = "Cliente Desconhecido"

_TELEFONE = re.compile(r"^(\d{2})(\d{5})(\d{4})$")


def calcula_idade(nascimento: date, hoje: date) -> int:
    """Anos completos: desconta um ano se o aniversário ainda não chegou."""
    idade = hoje.year - nascimento.year
    if (hoje.month, hoje.day) < (nascimento.month, nascimento.day):
        idade -= 1
    return idade


def mapa_clientes(clientes: Iterable[Cliente]) -> dict[int, str]:
    return {c.id: c.nome for c in clientes}


def nome_cliente(mapa: dict[int, str], cliente_id: int | None) -> str:
    if cliente_id is None:
        return CLIENTE_DESCONHECIDO
    return mapa.get(cliente_id) or CLIENTE_DESCONHECIDO


def formata_telefone(telefone: str) -> str:
    # celular com DDD: 11987654321 -> (11) 98765-4321; outros formatos ficam como estão
    return _TELEFONE.sub(r"(\1) \2-\3", telefone or "")


def filtra_clientes(clientes: Iterable[Cliente], termo: str) -> list[Cliente]:
    termo = (termo or "").strip()
    if not termo:
        return list(clientes)
    t = termo.lower()
    return [
        c for c in clientes
        if t in c.nome.lower() or t in c.email.lower() or termo in c.telefone
    ]
