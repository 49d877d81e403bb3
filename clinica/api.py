from __future__ import annotations

import logging
from typing import Any

import requests
from pydantic import ValidationError

from .auth import ContextoAuth
from .config import Config
from .errors import ErroApi, ErroFormatoResposta, ErroRede, ErroValidacao, NaoAutorizado, NaoEncontrado
from .models import Avaliacao, Cliente, Sessao
from .normalizacao import normaliza_avaliacao, normaliza_sessao

logger = logging.getLogger(__name__)


def _mensagem_servidor(r: requests.Response) -> str:
    try:
        corpo = r.json()
    except ValueError:
        corpo = None
    if isinstance(corpo, dict):
        for chave in ("message", "detail", "error"):
            if corpo.get(chave):
                return str(corpo[chave])
    return f"{r.status_code} {r.reason or ''}".strip()


def _erro_http(r: requests.Response) -> ErroApi:
    msg = _mensagem_servidor(r)
    if r.status_code in (401, 403):
        return NaoAutorizado(f"Não autorizado (token inválido/expirado): {msg}", r.status_code)
    if r.status_code == 404:
        return NaoEncontrado(f"Registro não encontrado: {msg}", r.status_code)
    if r.status_code in (400, 422):
        return ErroValidacao(msg, r.status_code)
    return ErroApi(f"Erro do servidor: {msg}", r.status_code)


def _lista(corpo: Any, recurso: str) -> list[Any]:
    if not isinstance(corpo, list):
        raise ErroFormatoResposta(f"Esperada uma lista de {recurso}, recebido {type(corpo).__name__}")
    return corpo


def _cliente(raw: Any) -> Cliente:
    if not isinstance(raw, dict):
        raise ErroFormatoResposta(f"Esperado um cliente, recebido {type(raw).__name__}")
    try:
        return Cliente.model_validate(raw)
    except ValidationError as e:
        raise ErroFormatoResposta(f"Cliente inválido na resposta: {e}") from e


def _exige_id(registro_id: int | None, recurso: str) -> int:
    # registros sem id (ainda não salvos) não têm rota própria
    if registro_id is None:
        raise ErroValidacao(f"{recurso} sem id: salve o registro antes de alterá-lo.")
    return registro_id


class ClinicaApi:
    """
    Cliente HTTP do backend REST da clínica.

    Cada operação é uma requisição independente: falhas viram subclasses de
    ``ErroApi`` e quem chama decide como avisar o usuário.
    """

    def __init__(
        self,
        config: Config,
        auth: ContextoAuth,
        http: requests.Session | None = None,
    ) -> None:
        self.base = config.api_base
        self.timeout = config.api_timeout
        self.zona = config.zona
        self.auth = auth
        self.http = http or requests.Session()
        self.http.headers.setdefault("Content-Type", "application/json")

    # -------------------------
    # HTTP
    # -------------------------
    def _request(self, metodo: str, path: str, **kwargs: Any) -> Any:
        headers = {**kwargs.pop("headers", {}), **self.auth.cabecalhos()}
        url = f"{self.base}{path}"
        try:
            r = self.http.request(metodo, url, headers=headers, timeout=self.timeout, **kwargs)
        except requests.RequestException as e:
            logger.warning("%s %s falhou: %s", metodo, path, e)
            raise ErroRede(f"Backend não acessível ({url}): {e}") from e

        if not r.ok:
            erro = _erro_http(r)
            logger.warning("%s %s -> %s", metodo, path, r.status_code)
            raise erro

        if r.status_code == 204 or not r.content:
            return None
        try:
            return r.json()
        except ValueError as e:
            raise ErroFormatoResposta(f"Resposta não é JSON em {metodo} {path}") from e

    def login(self, username: str, password: str) -> str:
        """Autentica e inicia o contexto com o token recebido."""
        corpo = self._request("POST", "/auth/login", json={"username": username.strip(), "password": password})
        token = corpo.get("token") if isinstance(corpo, dict) else None
        if not isinstance(token, str):
            raise ErroFormatoResposta("Resposta de login sem 'token'.")
        try:
            self.auth.inicia(token)
        except ValueError as e:
            raise ErroFormatoResposta("Resposta de login com 'token' vazio.") from e
        return self.auth.token

    # -------------------------
    # Clientes
    # -------------------------
    def lista_clientes(self, nome: str | None = None) -> list[Cliente]:
        params = {"nome": nome} if nome else None
        corpo = _lista(self._request("GET", "/clientes", params=params), "clientes")
        logger.debug("Carregados %d clientes", len(corpo))
        return [_cliente(c) for c in corpo]

    def busca_cliente(self, cliente_id: int) -> Cliente:
        return _cliente(self._request("GET", f"/clientes/{cliente_id}"))

    def cria_cliente(self, dados: dict[str, Any]) -> Cliente:
        logger.info("Criando cliente %s", dados.get("nome"))
        return _cliente(self._request("POST", "/clientes", json=dados))

    def atualiza_cliente(self, cliente_id: int, dados: dict[str, Any]) -> Cliente:
        logger.info("Atualizando cliente %s", cliente_id)
        return _cliente(self._request("PUT", f"/clientes/{cliente_id}", json=dados))

    def exclui_cliente(self, cliente_id: int) -> None:
        logger.info("Excluindo cliente %s", cliente_id)
        self._request("DELETE", f"/clientes/{cliente_id}")

    # -------------------------
    # Sessões
    # -------------------------
    def lista_sessoes(self) -> list[Sessao]:
        corpo = _lista(self._request("GET", "/sessoes"), "sessões")
        logger.debug("Carregadas %d sessões", len(corpo))
        return [normaliza_sessao(s, self.zona) for s in corpo]

    def lista_sessoes_cliente(self, cliente_id: int) -> list[Sessao]:
        corpo = _lista(self._request("GET", f"/sessoes/cliente/{cliente_id}"), "sessões")
        return [normaliza_sessao(s, self.zona) for s in corpo]

    def cria_sessao(self, sessao: Sessao) -> Sessao:
        logger.info("Agendando sessão para cliente %s em %s", sessao.cliente_id, sessao.data_hora_inicio)
        corpo = self._request("POST", f"/sessoes/cliente/{sessao.cliente_id}", json=sessao.para_api())
        return normaliza_sessao(corpo, self.zona)

    def atualiza_sessao(self, sessao_id: int, dados: Sessao | dict[str, Any]) -> Sessao:
        sessao_id = _exige_id(sessao_id, "Sessão")
        payload = dados.para_api() if isinstance(dados, Sessao) else dados
        logger.info("Atualizando sessão %s", sessao_id)
        return normaliza_sessao(self._request("PUT", f"/sessoes/{sessao_id}", json=payload), self.zona)

    def exclui_sessao(self, sessao_id: int) -> None:
        sessao_id = _exige_id(sessao_id, "Sessão")
        logger.info("Excluindo sessão %s", sessao_id)
        self._request("DELETE", f"/sessoes/{sessao_id}")

    # -------------------------
    # Avaliações
    # -------------------------
    def lista_avaliacoes_cliente(self, cliente_id: int) -> list[Avaliacao]:
        corpo = _lista(self._request("GET", f"/avaliacoes/cliente/{cliente_id}"), "avaliações")
        return [normaliza_avaliacao(a) for a in corpo]

    def cria_avaliacao(self, avaliacao: Avaliacao) -> Avaliacao:
        logger.info("Criando avaliação para cliente %s", avaliacao.cliente_id)
        corpo = self._request("POST", f"/avaliacoes/cliente/{avaliacao.cliente_id}", json=avaliacao.para_api())
        return normaliza_avaliacao(corpo)

    def atualiza_avaliacao(self, avaliacao_id: int, dados: Avaliacao | dict[str, Any]) -> Avaliacao:
        avaliacao_id = _exige_id(avaliacao_id, "Avaliação")
        payload = dados.para_api() if isinstance(dados, Avaliacao) else dados
        logger.info("Atualizando avaliação %s", avaliacao_id)
        return normaliza_avaliacao(self._request("PUT", f"/avaliacoes/{avaliacao_id}", json=payload))

    def exclui_avaliacao(self, avaliacao_id: int) -> None:
        avaliacao_id = _exige_id(avaliacao_id, "Avaliação")
        logger.info("Excluindo avaliação %s", avaliacao_id)
        self._request("DELETE", f"/avaliacoes/{avaliacao_id}")

    def adiciona_evolucao(self, avaliacao_id: int, texto: str) -> Avaliacao:
        avaliacao_id = _exige_id(avaliacao_id, "Avaliação")
        if not texto.strip():
            raise ErroValidacao("O texto da evolução é obrigatório.")
        corpo = self._request("POST", f"/avaliacoes/{avaliacao_id}/evolucoes", json={"evolucao": texto.strip()})
        return normaliza_avaliacao(corpo)
