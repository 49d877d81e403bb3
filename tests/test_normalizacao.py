"""Tests for the client-id parser applied to API responses."""

from datetime import datetime
from zoneinfo import ZoneInfo

import pytest

from clinica.errors import ErroFormatoResposta
from clinica.models import StatusSessao
from clinica.normalizacao import extrai_cliente_id, normaliza_avaliacao, normaliza_sessao

SESSAO = {
    "id": 10,
    "nome": "Sessão de Fisioterapia",
    "dataHoraInicio": "2025-10-21T09:00:00",
    "dataHoraFim": "2025-10-21T10:00:00",
    "status": "AGENDADA",
}


class TestExtraiClienteId:
    def test_current_shape(self):
        assert extrai_cliente_id({"clienteId": 3}) == 3

    def test_snake_case_shape(self):
        assert extrai_cliente_id({"cliente_id": 4}) == 4

    def test_nested_shape(self):
        assert extrai_cliente_id({"cliente": {"id": 5, "nome": "Ana"}}) == 5

    def test_fallback_order_prefers_clienteId(self):
        raw = {"clienteId": 1, "cliente_id": 2, "cliente": {"id": 3}}
        assert extrai_cliente_id(raw) == 1

    def test_null_current_falls_back(self):
        assert extrai_cliente_id({"clienteId": None, "cliente_id": 2}) == 2

    def test_digit_string_is_accepted(self):
        assert extrai_cliente_id({"clienteId": " 42 "}) == 42

    def test_missing_is_rejected_with_keys(self):
        with pytest.raises(ErroFormatoResposta, match="dataHoraInicio"):
            extrai_cliente_id(SESSAO)

    def test_nested_without_id_is_rejected(self):
        with pytest.raises(ErroFormatoResposta):
            extrai_cliente_id({"cliente": {"nome": "Ana"}})

    @pytest.mark.parametrize("valor", ["abc", 1.5, True, [1], "²", "1²"])
    def test_bad_values_are_rejected(self, valor):
        with pytest.raises(ErroFormatoResposta):
            extrai_cliente_id({"clienteId": valor})

    def test_non_object_is_rejected(self):
        with pytest.raises(ErroFormatoResposta, match="list"):
            extrai_cliente_id([1, 2])

    def test_error_is_also_value_error(self):
        with pytest.raises(ValueError):
            extrai_cliente_id({})


class TestNormalizaSessao:
    @pytest.mark.parametrize(
        "forma",
        [{"clienteId": 7}, {"cliente_id": 7}, {"cliente": {"id": 7, "nome": "Ana"}}],
    )
    def test_every_shape_yields_the_same_session(self, forma):
        s = normaliza_sessao({**SESSAO, **forma})
        assert s.cliente_id == 7
        assert s.id == 10
        assert s.status is StatusSessao.AGENDADA
        assert s.data_hora_inicio == datetime(2025, 10, 21, 9, 0)

    def test_aware_timestamps_become_local_wall_clock(self):
        s = normaliza_sessao(
            {**SESSAO, "clienteId": 1, "dataHoraInicio": "2025-10-21T12:00:00Z", "dataHoraFim": "2025-10-21T13:00:00Z"}
        )
        # America/Sao_Paulo = UTC-3
        assert s.data_hora_inicio == datetime(2025, 10, 21, 9, 0)
        assert s.data_hora_inicio.tzinfo is None

    def test_invalid_body_raises_format_error(self):
        with pytest.raises(ErroFormatoResposta, match="Sessao"):
            normaliza_sessao({**SESSAO, "clienteId": 1, "status": "DESCONHECIDO"})

    def test_round_trip_payload_uses_wire_names(self):
        s = normaliza_sessao({**SESSAO, "cliente_id": 2, "notasSessao": "joelho"})
        payload = s.para_api()
        assert payload["clienteId"] == 2
        assert payload["dataHoraInicio"] == "2025-10-21T09:00:00"
        assert payload["notasSessao"] == "joelho"
        assert "cliente_id" not in payload


class TestNormalizaAvaliacao:
    def test_nested_client(self):
        a = normaliza_avaliacao({"id": 1, "cliente": {"id": 9}, "queixaPrincipal": "lombalgia", "evolucoes": ["ok"]})
        assert a.cliente_id == 9
        assert a.evolucoes == ["ok"]
        assert a.model_extra["queixaPrincipal"] == "lombalgia"
        assert "cliente" not in a.model_extra

    def test_explicit_zone_overrides_default(self):
        s = normaliza_sessao(
            {**SESSAO, "clienteId": 1, "dataHoraInicio": "2025-10-19T20:00:00Z", "dataHoraFim": "2025-10-19T21:00:00Z"},
            ZoneInfo("Asia/Tokyo"),
        )
        assert s.data_hora_inicio == datetime(2025, 10, 20, 5, 0)
