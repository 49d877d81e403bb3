"""Tests for view state: two-step deletion, open edit form and refresh trigger."""

from datetime import datetime

import pytest

from clinica.agenda import FiltroPeriodo
from clinica.errors import ErroRede, ErroValidacao
from clinica.estado import (
    KEY_FILTRO,
    ConfirmacaoExclusao,
    EdicaoAtual,
    filtro_atual,
    marca_atualizacao,
    precisa_atualizar,
    remove_da_lista,
)
from tests.conftest import make_response, make_sessao


class TestConfirmacaoExclusao:
    def test_confirm_without_request_issues_no_delete(self, api, http):
        exclusao = ConfirmacaoExclusao({}, "sessao")
        assert exclusao.confirma(api.exclui_sessao) is False
        assert http.calls == []

    def test_request_then_confirm_issues_delete(self, api, http):
        http.queue(make_response(204))
        exclusao = ConfirmacaoExclusao({}, "sessao")
        exclusao.solicita(5)
        assert exclusao.confirma(api.exclui_sessao) is True
        assert [(c["method"], c["url"].rsplit("/", 1)[1]) for c in http.calls] == [("DELETE", "5")]
        assert exclusao.pendente is None

    def test_second_confirm_does_nothing(self, api, http):
        http.queue(make_response(204))
        exclusao = ConfirmacaoExclusao({}, "sessao")
        exclusao.solicita(5)
        exclusao.confirma(api.exclui_sessao)
        exclusao.confirma(api.exclui_sessao)
        assert len(http.calls) == 1

    def test_cancel_prevents_delete(self, api, http):
        exclusao = ConfirmacaoExclusao({}, "sessao")
        exclusao.solicita(5)
        exclusao.cancela()
        assert exclusao.confirma(api.exclui_sessao) is False
        assert http.calls == []

    def test_failure_propagates_and_clears_request(self, api, http):
        http.queue(ErroRede("sem rede"))
        exclusao = ConfirmacaoExclusao({}, "sessao")
        exclusao.solicita(5)
        with pytest.raises(ErroRede):
            exclusao.confirma(api.exclui_sessao)
        assert exclusao.pendente is None

    def test_resources_do_not_share_requests(self):
        estado = {}
        ConfirmacaoExclusao(estado, "cliente").solicita(1)
        assert ConfirmacaoExclusao(estado, "sessao").pendente is None
        assert ConfirmacaoExclusao(estado, "cliente").pendente == 1


class TestEdicaoAtual:
    def test_successful_save_closes_form(self, api, http):
        http.queue(make_response(200, {"id": 5, "clienteId": 2, "dataHoraInicio": "2025-10-21T09:00:00",
                                       "dataHoraFim": "2025-10-21T10:00:00"}))
        edicao = EdicaoAtual({}, "sessao")
        edicao.abre(5)
        salva = edicao.salva(lambda: api.atualiza_sessao(5, {"status": "CONCLUIDA"}))
        assert salva.id == 5
        assert edicao.atual is None

    def test_failed_save_keeps_form_open(self, api, http):
        http.queue(make_response(422, {"message": "horário ocupado"}))
        edicao = EdicaoAtual({}, "sessao")
        edicao.abre(5)
        with pytest.raises(ErroValidacao, match="horário ocupado"):
            edicao.salva(lambda: api.atualiza_sessao(5, {}))
        assert edicao.atual == 5

    def test_cancel_closes_form(self):
        estado = {}
        edicao = EdicaoAtual(estado, "sessao")
        edicao.abre(5)
        edicao.fecha()
        assert edicao.atual is None
        assert estado == {}

    def test_resources_do_not_share_forms(self):
        estado = {}
        EdicaoAtual(estado, "cliente").abre(1)
        assert EdicaoAtual(estado, "avaliacao").atual is None
        assert EdicaoAtual(estado, "cliente").atual == 1


class TestAtualizacao:
    def test_refresh_flag_is_consumed(self):
        estado = {}
        assert not precisa_atualizar(estado)
        marca_atualizacao(estado)
        assert precisa_atualizar(estado)
        assert not precisa_atualizar(estado)

    def test_filter_defaults_to_week(self):
        assert filtro_atual({}) is FiltroPeriodo.SEMANA
        assert filtro_atual({KEY_FILTRO: FiltroPeriodo.HOJE}) is FiltroPeriodo.HOJE

    def test_remove_da_lista_leaves_original_untouched(self):
        sessoes = [make_sessao(datetime(2025, 10, 20, 9, 0), sessao_id=i) for i in (1, 2, 3)]
        restantes = remove_da_lista(sessoes, 2)
        assert [s.id for s in restantes] == [1, 3]
        assert len(sessoes) == 3
