"""Shared test fixtures and helpers."""

import json
from datetime import date, datetime, timedelta
from typing import Any, Optional

import pytest
import requests

from clinica.api import ClinicaApi
from clinica.auth import ContextoAuth
from clinica.config import Config
from clinica.models import Cliente, Sessao, StatusSessao

# domingo, 19 de outubro de 2025, 10:30
AGORA = datetime(2025, 10, 19, 10, 30)


def make_sessao(
    inicio: datetime,
    sessao_id: int = 1,
    cliente_id: int = 1,
    minutos: int = 60,
    status: StatusSessao = StatusSessao.AGENDADA,
    notas: Optional[str] = None,
) -> Sessao:
    """Helper to create a Sessao starting at ``inicio``."""
    return Sessao(
        id=sessao_id,
        cliente_id=cliente_id,
        data_hora_inicio=inicio,
        data_hora_fim=inicio + timedelta(minutes=minutos),
        status=status,
        notas_sessao=notas,
    )


def make_cliente(
    cliente_id: int = 1,
    nome: str = "Ana Souza",
    email: str = "ana@exemplo.com",
    telefone: str = "11987654321",
    nascimento: Optional[date] = None,
) -> Cliente:
    return Cliente(id=cliente_id, nome=nome, email=email, telefone=telefone, data_nascimento=nascimento)


def make_response(status: int = 200, body: Any = None, reason: str = "") -> requests.Response:
    """A real requests.Response carrying a JSON body."""
    r = requests.Response()
    r.status_code = status
    r.reason = reason
    r.encoding = "utf-8"
    r._content = b"" if body is None else json.dumps(body).encode("utf-8")
    return r


class FakeHttp:
    """Stand-in for requests.Session: records calls, replays queued responses."""

    def __init__(self) -> None:
        self.headers: dict[str, str] = {}
        self.calls: list[dict[str, Any]] = []
        self._respostas: list[Any] = []

    def queue(self, resposta: Any) -> None:
        self._respostas.append(resposta)

    def request(self, method: str, url: str, **kwargs: Any) -> requests.Response:
        self.calls.append({"method": method, "url": url, **kwargs})
        resposta = self._respostas.pop(0) if self._respostas else make_response(200, [])
        if isinstance(resposta, Exception):
            raise resposta
        return resposta


@pytest.fixture
def config():
    return Config(api_base="http://backend.test/api", api_timeout=5.0, tz_clinica="America/Sao_Paulo", log_level="INFO")


@pytest.fixture
def http():
    return FakeHttp()


@pytest.fixture
def auth():
    return ContextoAuth({})


@pytest.fixture
def api(config, auth, http):
    return ClinicaApi(config, auth, http=http)
