from __future__ import annotations

from collections.abc import MutableMapping
from typing import Any, Callable

from .agenda import FiltroPeriodo

# Chaves centralizadas para evitar erros de digitação entre as telas
KEY_FILTRO = "filtro_agenda"
KEY_ATUALIZAR = "_atualizar"
KEY_EXCLUSAO = "_exclusao_pendente"
KEY_EDICAO = "_em_edicao"


class ConfirmacaoExclusao:
    """
    Exclusão em dois passos: ``solicita`` marca o registro, ``confirma``
    executa. Sem um ``solicita`` anterior, ``confirma`` não faz nada.
    """

    def __init__(self, estado: MutableMapping[str, Any], recurso: str) -> None:
        self._estado = estado
        self._chave = f"{KEY_EXCLUSAO}_{recurso}"

    @property
    def pendente(self) -> int | None:
        return self._estado.get(self._chave)

    def solicita(self, registro_id: int) -> None:
        self._estado[self._chave] = registro_id

    def cancela(self) -> None:
        self._estado.pop(self._chave, None)

    def confirma(self, executor: Callable[[int], Any]) -> bool:
        """
        Executa a exclusão pendente, se houver. O pedido é limpo mesmo se
        ``executor`` levantar erro, e o erro segue para quem chamou.
        """
        registro_id = self.pendente
        if registro_id is None:
            return False
        try:
            executor(registro_id)
        finally:
            self.cancela()
        return True


class EdicaoAtual:
    """Registro aberto no formulário de edição; um por recurso."""

    def __init__(self, estado: MutableMapping[str, Any], recurso: str) -> None:
        self._estado = estado
        self._chave = f"{KEY_EDICAO}_{recurso}"

    @property
    def atual(self) -> int | None:
        return self._estado.get(self._chave)

    def abre(self, registro_id: int) -> None:
        self._estado[self._chave] = registro_id

    def fecha(self) -> None:
        self._estado.pop(self._chave, None)

    def salva(self, executor: Callable[[], Any]) -> Any:
        """
        Executa o salvamento e fecha o formulário. Se ``executor`` levantar
        erro o formulário continua aberto com o que foi digitado.
        """
        resultado = executor()
        self.fecha()
        return resultado


def marca_atualizacao(estado: MutableMapping[str, Any]) -> None:
    estado[KEY_ATUALIZAR] = True


def precisa_atualizar(estado: MutableMapping[str, Any]) -> bool:
    """Consome o pedido de recarga marcado após uma alteração."""
    return bool(estado.pop(KEY_ATUALIZAR, False))


def filtro_atual(estado: MutableMapping[str, Any]) -> FiltroPeriodo:
    # a agenda abre na semana
    return estado.get(KEY_FILTRO, FiltroPeriodo.SEMANA)


def remove_da_lista(itens: list[Any], registro_id: int) -> list[Any]:
    """Cópia local sem o registro excluído (só depois do DELETE ter sucesso)."""
    return [i for i in itens if getattr(i, "id", None) != registro_id]
