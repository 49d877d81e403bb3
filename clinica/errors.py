from __future__ import annotations


class ErroApi(Exception):
    """Erro base da camada de acesso ao backend."""

    def __init__(self, mensagem: str, status_code: int | None = None) -> None:
        super().__init__(mensagem)
        self.mensagem = mensagem
        self.status_code = status_code


class ErroRede(ErroApi):
    """Falha de conexão ou timeout: o backend não respondeu."""


class ErroValidacao(ErroApi):
    """Dados recusados pelo servidor (400/422) ou pelo formulário local."""


class NaoEncontrado(ErroApi):
    pass


class NaoAutorizado(ErroApi, PermissionError):
    """401/403: token ausente, inválido ou expirado."""


class ErroFormatoResposta(ErroApi, ValueError):
    """Corpo da resposta num formato que o cliente não reconhece."""
