from __future__ import annotations

import argparse
import os
import sys

from clinica.agenda import FiltroPeriodo, agenda, agora_local, rotulo_status
from clinica.api import ClinicaApi
from clinica.auth import ContextoAuth
from clinica.clientes import calcula_idade, filtra_clientes, formata_telefone, mapa_clientes, nome_cliente
from clinica.config import carrega_config
from clinica.errors import ErroApi


def _api(args: argparse.Namespace) -> ClinicaApi:
    config = carrega_config()
    auth = ContextoAuth()
    token = args.token or os.getenv("CLINICA_TOKEN")
    if token:
        auth.inicia(token)
    return ClinicaApi(config, auth)


def cmd_agenda(args: argparse.Namespace) -> None:
    api = _api(args)
    sessoes = api.lista_sessoes()
    nomes = mapa_clientes(api.lista_clientes())

    grupos = agenda(sessoes, FiltroPeriodo(args.filtro), agora_local(api.zona))
    if not grupos:
        print("Nenhum agendamento neste período.")
        return

    for rotulo, itens in grupos:
        print(rotulo.upper())
        for s in itens:
            print(
                f"  {s.data_hora_inicio:%H:%M}-{s.data_hora_fim:%H:%M} | "
                f"{nome_cliente(nomes, s.cliente_id)} | {rotulo_status(s.status)}"
            )


def cmd_clientes(args: argparse.Namespace) -> None:
    api = _api(args)
    hoje = agora_local(api.zona).date()
    clientes = filtra_clientes(api.lista_clientes(args.nome), args.nome or "")
    if not clientes:
        print("Nenhum cliente encontrado.")
        return

    for c in clientes:
        idade = f"{calcula_idade(c.data_nascimento, hoje)} anos" if c.data_nascimento else "-"
        print(f"{c.id} | {c.nome} | {idade} | {c.email or '-'} | {formata_telefone(c.telefone) or '-'}")


def build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(prog="clinica_cli", description="CLI Clínica Fisio (agenda e clientes)")
    p.add_argument("--token", default=None, help="Token bearer (padrão: $CLINICA_TOKEN)")
    sub = p.add_subparsers(required=True)

    p_agenda = sub.add_parser("agenda", help="Sessões agrupadas por dia")
    p_agenda.add_argument("--filtro", choices=[f.value for f in FiltroPeriodo], default=FiltroPeriodo.SEMANA.value)
    p_agenda.set_defaults(func=cmd_agenda)

    p_cli = sub.add_parser("clientes", help="Lista clientes")
    p_cli.add_argument("--nome", default=None)
    p_cli.set_defaults(func=cmd_clientes)

    return p


def main(argv: list[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    try:
        args.func(args)
    except ErroApi as e:
        print(f"Erro: {e}", file=sys.stderr)
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
