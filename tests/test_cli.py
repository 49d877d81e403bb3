"""Tests for the command-line agenda and client listing."""

from datetime import datetime

import pytest

from clinica import cli
from clinica.errors import ErroRede
from tests.conftest import make_cliente, make_sessao


class FakeApi:
    zona = None

    def __init__(self, sessoes=None, clientes=None, erro=None):
        self.sessoes = sessoes or []
        self.clientes = clientes or []
        self.erro = erro

    def lista_sessoes(self):
        if self.erro:
            raise self.erro
        return self.sessoes

    def lista_clientes(self, nome=None):
        return self.clientes


@pytest.fixture
def agora(monkeypatch):
    monkeypatch.setattr(cli, "agora_local", lambda zona=None: datetime(2025, 10, 19, 8, 0))


def test_parser_defaults():
    args = cli.build_parser().parse_args(["agenda"])
    assert args.filtro == "semana"
    assert args.token is None


def test_parser_rejects_unknown_filter():
    with pytest.raises(SystemExit):
        cli.build_parser().parse_args(["agenda", "--filtro", "ano"])


def test_agenda_prints_grouped_days(monkeypatch, capsys, agora):
    api = FakeApi(
        sessoes=[
            make_sessao(datetime(2025, 10, 20, 14, 0), sessao_id=2, cliente_id=1),
            make_sessao(datetime(2025, 10, 20, 9, 0), sessao_id=1, cliente_id=7),
        ],
        clientes=[make_cliente(1, "Ana Souza")],
    )
    monkeypatch.setattr(cli, "_api", lambda args: api)
    assert cli.main(["agenda", "--filtro", "todos"]) == 0
    linhas = capsys.readouterr().out.splitlines()
    assert linhas == [
        "AMANHÃ",
        "  09:00-10:00 | Cliente Desconhecido | Agendada",
        "  14:00-15:00 | Ana Souza | Agendada",
    ]


def test_agenda_empty_period(monkeypatch, capsys, agora):
    monkeypatch.setattr(cli, "_api", lambda args: FakeApi())
    assert cli.main(["agenda", "--filtro", "hoje"]) == 0
    assert "Nenhum agendamento" in capsys.readouterr().out


def test_api_error_exit_code(monkeypatch, capsys):
    monkeypatch.setattr(cli, "_api", lambda args: FakeApi(erro=ErroRede("backend fora")))
    assert cli.main(["agenda"]) == 1
    assert "backend fora" in capsys.readouterr().err


def test_clientes_lists_age(monkeypatch, capsys, agora):
    from datetime import date

    api = FakeApi(clientes=[make_cliente(3, "Bruno Lima", nascimento=date(1990, 10, 20))])
    monkeypatch.setattr(cli, "_api", lambda args: api)
    assert cli.main(["clientes"]) == 0
    assert capsys.readouterr().out.strip() == "3 | Bruno Lima | 34 anos | ana@exemplo.com | (11) 98765-4321"
