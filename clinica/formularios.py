from __future__ import annotations

import re
from datetime import date, datetime, time
from typing import Any

from pydantic import ValidationError
from pydantic.alias_generators import to_camel

from .errors import ErroValidacao
from .models import NOME_SESSAO_PADRAO, Avaliacao, Cliente, Sessao, StatusSessao

INICIO_PADRAO = time(9, 0)
FIM_PADRAO = time(10, 0)


def sessao_padrao(dia: date, cliente_id: int | None = None) -> dict[str, Any]:
    """Valores iniciais do formulário de nova sessão."""
    return {
        "nome": NOME_SESSAO_PADRAO,
        "cliente_id": cliente_id,
        "data_hora_inicio": datetime.combine(dia, INICIO_PADRAO),
        "data_hora_fim": datetime.combine(dia, FIM_PADRAO),
        "status": StatusSessao.AGENDADA,
        "notas_sessao": "",
    }


def dados_da_sessao(sessao: Sessao) -> dict[str, Any]:
    """Formulário preenchido a partir de uma sessão existente (edição)."""
    return sessao.model_dump()


def valida_sessao(dados: dict[str, Any]) -> Sessao:
    if not dados.get("cliente_id") or not dados.get("data_hora_inicio") or not dados.get("data_hora_fim"):
        raise ErroValidacao("Cliente e datas são obrigatórios.")
    if dados["data_hora_fim"] <= dados["data_hora_inicio"]:
        raise ErroValidacao("O fim da sessão deve ser depois do início.")

    dados = {**dados, "nome": (dados.get("nome") or "").strip() or NOME_SESSAO_PADRAO}
    dados["notas_sessao"] = (dados.get("notas_sessao") or "").strip() or None
    try:
        return Sessao.model_validate(dados)
    except ValidationError as e:
        raise ErroValidacao(f"Dados da sessão inválidos: {e}") from e


# =========================
# Clientes
# =========================
CAMPOS_CLIENTE = ("nome", "email", "telefone", "sexo", "data_nascimento", "profissao", "bairro", "cidade")
SEXOS = ("Feminino", "Masculino", "Outro")

_EMAIL_RE = re.compile(r"^[^@\s]+@[^@\s]+\.[^@\s]+$")


def dados_do_cliente(cliente: Cliente | None = None) -> dict[str, Any]:
    """Formulário de cliente: vazio para cadastro, preenchido para edição."""
    if cliente is None:
        return {campo: None for campo in CAMPOS_CLIENTE}
    return {campo: getattr(cliente, campo) for campo in CAMPOS_CLIENTE}


def valida_cliente(dados: dict[str, Any], hoje: date | None = None) -> dict[str, Any]:
    """
    Payload (camelCase) para POST/PUT de cliente.

    Campos em branco seguem como ``None`` para que a edição possa
    apagar um valor já cadastrado.
    """
    limpos: dict[str, Any] = {}
    for campo in CAMPOS_CLIENTE:
        valor = dados.get(campo)
        if isinstance(valor, str):
            valor = valor.strip()
        limpos[campo] = valor or None

    if not limpos["nome"]:
        raise ErroValidacao("O nome do cliente é obrigatório.")
    if limpos["email"] and not _EMAIL_RE.match(limpos["email"]):
        raise ErroValidacao(f"E-mail inválido: {limpos['email']}")
    if limpos["telefone"]:
        digitos = re.sub(r"\D", "", limpos["telefone"])
        if len(digitos) not in (10, 11):
            raise ErroValidacao("O telefone deve ter DDD e 8 ou 9 dígitos.")
        limpos["telefone"] = digitos
    nascimento = limpos["data_nascimento"]
    if nascimento is not None:
        if nascimento > (hoje or date.today()):
            raise ErroValidacao("A data de nascimento não pode estar no futuro.")
        limpos["data_nascimento"] = nascimento.isoformat()

    return {to_camel(campo): valor for campo, valor in limpos.items()}


# =========================
# Avaliações
# =========================
def campos_da_avaliacao(avaliacao: Avaliacao) -> dict[str, str]:
    """Campos clínicos em texto (extras da resposta) editáveis no formulário."""
    return {k: v for k, v in (avaliacao.model_extra or {}).items() if isinstance(v, str) or v is None}


def valida_avaliacao(avaliacao: Avaliacao, data_avaliacao: date | None, campos: dict[str, str]) -> Avaliacao:
    """Avaliação com a data e os campos de texto alterados; o resto é mantido."""
    dados = avaliacao.model_dump(by_alias=True)
    dados.update({k: (v or "").strip() for k, v in campos.items()})
    dados["dataAvaliacao"] = data_avaliacao
    try:
        return Avaliacao.model_validate(dados)
    except ValidationError as e:
        raise ErroValidacao(f"Dados da avaliação inválidos: {e}") from e
