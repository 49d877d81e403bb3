from __future__ import annotations

import logging
from collections.abc import MutableMapping
from datetime import datetime, timezone
from typing import Any

from jose import JWTError, jwt

logger = logging.getLogger(__name__)

CHAVE_TOKEN = "token"

# margem para não usar um token que expira durante a requisição
MARGEM_EXPIRACAO_S = 5


def claims_do_token(token: str) -> dict[str, Any]:
    """Claims do JWT sem verificar assinatura (uso só na interface)."""
    try:
        claims = jwt.get_unverified_claims(token)
    except JWTError:
        return {}
    return claims if isinstance(claims, dict) else {}


def _limpa(token: str) -> str:
    # protege contra espaços / aspas acidentais
    return token.strip().strip('"').strip("'")


class ContextoAuth:
    """
    Contexto de autenticação explícito:
    - emitido no login (``inicia``)
    - limpo no logout (``encerra``)
    - injetado em cada requisição (``cabecalhos``)

    O token fica guardado num mapeamento mutável: ``st.session_state`` na
    interface, um dict simples nos testes e na CLI.
    """

    def __init__(self, armazenamento: MutableMapping[str, Any] | None = None) -> None:
        self._armazenamento = armazenamento if armazenamento is not None else {}

    @property
    def token(self) -> str | None:
        token = self._armazenamento.get(CHAVE_TOKEN)
        return token if isinstance(token, str) and token else None

    @property
    def autenticado(self) -> bool:
        return self.token is not None

    def inicia(self, token: str) -> None:
        token = _limpa(token)
        if not token:
            raise ValueError("Token vazio.")
        self._armazenamento[CHAVE_TOKEN] = token
        logger.info("Sessão iniciada para %s", self.usuario)

    def encerra(self) -> None:
        self._armazenamento.pop(CHAVE_TOKEN, None)

    def cabecalhos(self) -> dict[str, str]:
        token = self.token
        if not token:
            return {}
        return {"Authorization": f"Bearer {token}"}

    @property
    def usuario(self) -> str:
        token = self.token
        if not token:
            return "usuário"
        c = claims_do_token(token)
        return str(c.get("name") or c.get("username") or c.get("sub") or "usuário")

    def expirado(self, agora: datetime | None = None) -> bool:
        """True se o claim ``exp`` já passou; tokens sem ``exp`` não expiram aqui."""
        token = self.token
        if not token:
            return False
        try:
            exp = int(claims_do_token(token)["exp"])
        except (KeyError, TypeError, ValueError):
            return False

        agora = agora or datetime.now(tz=timezone.utc)
        return int(agora.timestamp()) >= exp - MARGEM_EXPIRACAO_S
