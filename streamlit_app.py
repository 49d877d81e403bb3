from __future__ import annotations

from datetime import date, datetime

import streamlit as st

from clinica.agenda import (
    ROTULOS_FILTRO,
    agenda,
    agora_local,
    data_por_extenso,
    resumo_dashboard,
    rotulo_status,
    saudacao,
)
from clinica.api import ClinicaApi
from clinica.auth import ContextoAuth
from clinica.clientes import calcula_idade, filtra_clientes, formata_telefone, mapa_clientes, nome_cliente
from clinica.config import carrega_config
from clinica.errors import ErroApi, ErroValidacao, NaoAutorizado, NaoEncontrado
from clinica.estado import (
    KEY_FILTRO,
    ConfirmacaoExclusao,
    EdicaoAtual,
    filtro_atual,
    marca_atualizacao,
    precisa_atualizar,
    remove_da_lista,
)
from clinica.formularios import (
    SEXOS,
    campos_da_avaliacao,
    dados_da_sessao,
    dados_do_cliente,
    sessao_padrao,
    valida_avaliacao,
    valida_cliente,
    valida_sessao,
)
from clinica.models import Avaliacao, Cliente, Sessao, StatusSessao

st.set_page_config(page_title="Clínica Fisio", layout="wide")


@st.cache_resource
def get_config():
    return carrega_config()


config = get_config()
auth = ContextoAuth(st.session_state)
api = ClinicaApi(config, auth)


def sessao_invalida(e: NaoAutorizado) -> None:
    st.session_state["auth_error"] = str(e)
    st.error("Sessão não válida. Saia pela barra lateral e faça login novamente.")


def do_logout() -> None:
    auth.encerra()
    st.session_state.pop("auth_error", None)
    st.rerun()


# Barra lateral: login

with st.sidebar:
    st.header("Acesso")

    if not auth.autenticado:
        u = st.text_input("Usuário", key="login_user")
        p = st.text_input("Senha", type="password", key="login_pass")

        if st.button("Entrar", key="login_btn"):
            try:
                api.login(u.strip().lower(), p)
                st.session_state.pop("auth_error", None)
                st.rerun()
            except NaoAutorizado:
                st.error("Credenciais inválidas.")
            except ErroApi as e:
                st.error(str(e))
    else:
        st.write(f"Usuário: **{auth.usuario}**")

        if st.session_state.get("auth_error"):
            st.error(st.session_state["auth_error"])

        if st.button("Sair", key="logout_btn"):
            do_logout()

    st.divider()
    st.caption(f"API: {config.api_base}")


st.title("Clínica Fisio")

if not auth.autenticado:
    st.info("Faça login pela barra lateral para acessar a clínica.")
    st.stop()

if auth.expirado():
    st.error("Sessão expirada. Saia pela barra lateral e faça login novamente.")
    st.stop()


# Dados (recarregados quando uma alteração marca atualização)

def carrega_dados() -> None:
    with st.spinner("Carregando..."):
        try:
            st.session_state["sessoes"] = api.lista_sessoes()
            st.session_state["clientes"] = api.lista_clientes()
        except NaoAutorizado as e:
            sessao_invalida(e)
            st.stop()
        except ErroApi as e:
            st.error(f"Erro ao carregar dados: {e}")
            st.session_state.setdefault("sessoes", [])
            st.session_state.setdefault("clientes", [])


if precisa_atualizar(st.session_state) or "sessoes" not in st.session_state:
    carrega_dados()

sessoes: list[Sessao] = st.session_state["sessoes"]
clientes = st.session_state["clientes"]
nomes = mapa_clientes(clientes)
agora = agora_local(config.zona)


def formulario_sessao(
    sessao: Sessao | None,
    prefixo: str,
    cliente_id: int | None = None,
    edicao: EdicaoAtual | None = None,
) -> None:
    """Cria (sessao=None) ou edita uma sessão."""
    dados = dados_da_sessao(sessao) if sessao else sessao_padrao(agora.date(), cliente_id)
    ids = [c.id for c in clientes]

    with st.form(key=f"{prefixo}_form"):
        nome = st.text_input("Nome da sessão", value=dados["nome"])
        cid = st.selectbox(
            "Cliente",
            options=ids,
            index=ids.index(dados["cliente_id"]) if dados["cliente_id"] in ids else None,
            format_func=lambda i: nomes.get(i, str(i)),
            placeholder="Selecione um cliente",
        )
        c1, c2 = st.columns(2)
        d_ini = c1.date_input("Data", value=dados["data_hora_inicio"].date())
        h_ini = c1.time_input("Início", value=dados["data_hora_inicio"].time())
        h_fim = c2.time_input("Fim", value=dados["data_hora_fim"].time())
        status = st.selectbox(
            "Status",
            options=list(StatusSessao),
            index=list(StatusSessao).index(StatusSessao(dados["status"])),
            format_func=rotulo_status,
        )
        notas = st.text_area("Notas adicionais", value=dados["notas_sessao"] or "")

        b_salvar, b_cancelar = st.columns(2)
        salvar = b_salvar.form_submit_button("Salvar alterações" if sessao else "Agendar sessão")
        cancelar = edicao is not None and b_cancelar.form_submit_button("Cancelar")

    if cancelar:
        edicao.fecha()
        st.rerun()

    if salvar:
        try:
            nova = valida_sessao(
                {
                    "id": sessao.id if sessao else None,
                    "cliente_id": cid,
                    "nome": nome,
                    "data_hora_inicio": datetime.combine(d_ini, h_ini),
                    "data_hora_fim": datetime.combine(d_ini, h_fim),
                    "status": status,
                    "notas_sessao": notas,
                }
            )
            if sessao and sessao.id is not None:
                if edicao is not None:
                    edicao.salva(lambda: api.atualiza_sessao(sessao.id, nova))
                else:
                    api.atualiza_sessao(sessao.id, nova)
                st.toast("Sessão atualizada com sucesso!")
            else:
                api.cria_sessao(nova)
                st.toast("Sessão agendada com sucesso!")
            marca_atualizacao(st.session_state)
            st.rerun()
        except ErroValidacao as e:
            st.error(str(e))
        except NaoAutorizado as e:
            sessao_invalida(e)
        except ErroApi as e:
            st.error(f"Erro ao salvar sessão: {e}")


def formulario_cliente(cliente: Cliente | None, prefixo: str, edicao: EdicaoAtual | None = None) -> None:
    """Cadastra (cliente=None) ou edita um cliente."""
    dados = dados_do_cliente(cliente)

    with st.form(key=f"{prefixo}_form", clear_on_submit=cliente is None):
        c1, c2 = st.columns(2)
        nome = c1.text_input("Nome", value=dados["nome"] or "")
        email = c2.text_input("Email", value=dados["email"] or "")
        tel = c1.text_input("Telefone", value=dados["telefone"] or "")
        nasc = c2.date_input(
            "Data de nascimento", value=dados["data_nascimento"], min_value=date(1900, 1, 1), max_value=agora.date()
        )
        sexo = c1.selectbox(
            "Sexo",
            options=list(SEXOS),
            index=SEXOS.index(dados["sexo"]) if dados["sexo"] in SEXOS else None,
            placeholder="Não informado",
        )
        profissao = c2.text_input("Profissão", value=dados["profissao"] or "")
        bairro = c1.text_input("Bairro", value=dados["bairro"] or "")
        cidade = c2.text_input("Cidade", value=dados["cidade"] or "")

        b_salvar, b_cancelar = st.columns(2)
        salvar = b_salvar.form_submit_button("Salvar alterações" if cliente else "Salvar cliente")
        cancelar = edicao is not None and b_cancelar.form_submit_button("Cancelar")

    if cancelar:
        edicao.fecha()
        st.rerun()

    if salvar:
        try:
            payload = valida_cliente(
                {
                    "nome": nome,
                    "email": email,
                    "telefone": tel,
                    "data_nascimento": nasc,
                    "sexo": sexo,
                    "profissao": profissao,
                    "bairro": bairro,
                    "cidade": cidade,
                },
                agora.date(),
            )
            if cliente is not None:
                if edicao is not None:
                    salvo = edicao.salva(lambda: api.atualiza_cliente(cliente.id, payload))
                else:
                    salvo = api.atualiza_cliente(cliente.id, payload)
                st.toast(f"Cliente atualizado: {salvo.nome}")
            else:
                novo = api.cria_cliente(payload)
                st.toast(f"Cliente criado: {novo.nome}")
            marca_atualizacao(st.session_state)
            st.rerun()
        except ErroValidacao as e:
            st.error(str(e))
        except NaoAutorizado as e:
            sessao_invalida(e)
        except ErroApi as e:
            st.error(f"Erro ao salvar cliente: {e}")


def ficha_cliente(cliente_id: int, ficha: EdicaoAtual) -> None:
    """Dados do cliente com suas sessões e avaliações."""
    try:
        with st.spinner("Carregando ficha..."):
            cliente = api.busca_cliente(cliente_id)
            historico = api.lista_sessoes_cliente(cliente_id)
            avaliacoes_cli = api.lista_avaliacoes_cliente(cliente_id)
    except NaoAutorizado as e:
        sessao_invalida(e)
        return
    except NaoEncontrado:
        st.warning("Cliente não encontrado. Ele pode ter sido excluído.")
        ficha.fecha()
        return
    except ErroApi as e:
        st.error(f"Erro ao carregar ficha: {e}")
        return

    topo, fechar = st.columns([6, 1])
    topo.markdown(f"#### {cliente.nome}")
    if fechar.button("Fechar", key="ficha_fechar"):
        ficha.fecha()
        st.rerun()

    idade = f"{calcula_idade(cliente.data_nascimento, agora.date())} anos" if cliente.data_nascimento else "-"
    st.write(
        f"{cliente.email or '-'} | {formata_telefone(cliente.telefone) or '-'} | {idade} | "
        f"{cliente.profissao or '-'} | {', '.join(filter(None, [cliente.bairro, cliente.cidade])) or '-'}"
    )

    st.write(f"**Sessões** ({len(historico)})")
    if not historico:
        st.info("Nenhuma sessão para este cliente.")
    for s in sorted(historico, key=lambda s: s.data_hora_inicio, reverse=True):
        st.write(
            f"- {s.data_hora_inicio:%d/%m/%Y %H:%M} | {s.nome} | {rotulo_status(s.status)}"
            + (f" | {s.notas_sessao}" if s.notas_sessao else "")
        )

    st.write(f"**Avaliações** ({len(avaliacoes_cli)})")
    for a in avaliacoes_cli:
        quando = a.data_avaliacao.strftime("%d/%m/%Y") if a.data_avaliacao else "-"
        st.write(f"- {quando} | {len(a.evolucoes)} evoluções")

    with st.expander("Nova sessão para este cliente"):
        formulario_sessao(None, f"ficha_sessao_{cliente_id}", cliente_id=cliente_id)


tab1, tab2, tab3, tab4 = st.tabs(["Dashboard", "Clientes", "Agendamentos", "Avaliações"])


# TAB 1 - Dashboard

with tab1:
    st.subheader(f"{saudacao(agora)}, {auth.usuario}!")
    resumo = resumo_dashboard(sessoes, clientes, agora)

    c1, c2, c3, c4 = st.columns(4)
    c1.metric("Total de clientes", resumo.total_clientes)
    c2.metric("Sessões hoje", len(resumo.sessoes_hoje))
    c3.metric("Próximas sessões", resumo.proximas)
    c4.metric("Sessões no mês", resumo.este_mes)

    st.divider()
    st.write(f"**Agenda do dia** | {data_por_extenso(agora.date())}")
    if not resumo.sessoes_hoje:
        st.info("Nenhuma sessão hoje.")
    for s in resumo.sessoes_hoje:
        st.write(
            f"- **{s.data_hora_inicio:%H:%M}** | {nome_cliente(nomes, s.cliente_id)} | "
            f"{s.nome} | {rotulo_status(s.status)}"
        )


# TAB 2 - Clientes

with tab2:
    st.subheader("Clientes")

    with st.expander("Adicionar cliente"):
        formulario_cliente(None, "novo_cliente")

    termo = st.text_input("Buscar por nome...", key="cli_busca")
    encontrados = filtra_clientes(clientes, termo)
    exclusao_cliente = ConfirmacaoExclusao(st.session_state, "cliente")
    edicao_cliente = EdicaoAtual(st.session_state, "cliente")
    ficha = EdicaoAtual(st.session_state, "ficha_cliente")

    if not encontrados:
        st.info("Nenhum cliente encontrado.")
    for c in encontrados:
        idade = f"{calcula_idade(c.data_nascimento, agora.date())} anos" if c.data_nascimento else "-"
        cadastro = c.data_cadastro.strftime("%d/%m/%Y") if c.data_cadastro else "Data não informada"
        col, b_ver, b_edit, b_del = st.columns([6, 1, 1, 1])
        col.write(
            f"**{c.nome}** | {c.email or '-'} | {formata_telefone(c.telefone) or '-'} | "
            f"{idade} | Cadastrado em {cadastro}"
        )
        if b_ver.button("Ficha", key=f"cli_ver_{c.id}"):
            ficha.abre(c.id)
        if b_edit.button("Editar", key=f"cli_edit_{c.id}"):
            edicao_cliente.abre(c.id)
        if b_del.button("Excluir", key=f"cli_del_{c.id}"):
            exclusao_cliente.solicita(c.id)

    cliente_em_edicao = next((c for c in clientes if c.id == edicao_cliente.atual), None)
    if cliente_em_edicao:
        st.divider()
        st.write("**Editar cliente**")
        formulario_cliente(cliente_em_edicao, f"edita_cliente_{cliente_em_edicao.id}", edicao_cliente)

    if ficha.atual is not None:
        st.divider()
        ficha_cliente(ficha.atual, ficha)

    if exclusao_cliente.pendente is not None:
        st.warning(
            f'Excluir o cliente "{nomes.get(exclusao_cliente.pendente, "")}"? Esta ação não pode ser desfeita.'
        )
        c1, c2 = st.columns(2)
        if c1.button("Confirmar exclusão", key="cli_del_ok"):
            try:
                exclusao_cliente.confirma(api.exclui_cliente)
                st.toast("Cliente excluído com sucesso.")
                marca_atualizacao(st.session_state)
                st.rerun()
            except NaoAutorizado as e:
                sessao_invalida(e)
            except ErroApi as e:
                st.error(f"Erro ao excluir cliente: {e}")
        if c2.button("Cancelar", key="cli_del_cancel"):
            exclusao_cliente.cancela()
            st.rerun()


# TAB 3 - Agendamentos

with tab3:
    st.subheader("Agendamentos")

    filtro = st.radio(
        "Período",
        options=list(ROTULOS_FILTRO),
        index=list(ROTULOS_FILTRO).index(filtro_atual(st.session_state)),
        format_func=ROTULOS_FILTRO.get,
        horizontal=True,
    )
    st.session_state[KEY_FILTRO] = filtro

    with st.expander("Novo agendamento"):
        formulario_sessao(None, "nova_sessao")

    exclusao_sessao = ConfirmacaoExclusao(st.session_state, "sessao")
    edicao_sessao = EdicaoAtual(st.session_state, "sessao")
    grupos = agenda(sessoes, filtro, agora)

    if not grupos:
        st.info("Nenhum agendamento neste período. Tente alterar o filtro ou adicione um novo agendamento.")

    for rotulo, itens in grupos:
        st.markdown(f"#### {rotulo}")
        for s in itens:
            col, b_edit, b_del = st.columns([6, 1, 1])
            col.write(
                f"**{s.data_hora_inicio:%H:%M}** - {s.data_hora_fim:%H:%M} | "
                f"**{nome_cliente(nomes, s.cliente_id)}** | {rotulo_status(s.status)}"
                + (f" | {s.notas_sessao}" if s.notas_sessao else "")
            )
            if s.id is None:
                continue
            if b_edit.button("Editar", key=f"ses_edit_{s.id}"):
                edicao_sessao.abre(s.id)
            if b_del.button("Excluir", key=f"ses_del_{s.id}"):
                exclusao_sessao.solicita(s.id)

    em_edicao = next((s for s in sessoes if s.id == edicao_sessao.atual), None)
    if em_edicao:
        st.divider()
        st.write("**Editar sessão**")
        formulario_sessao(em_edicao, f"edita_sessao_{em_edicao.id}", edicao=edicao_sessao)

    if exclusao_sessao.pendente is not None:
        st.warning("Excluir agendamento? Esta ação não pode ser desfeita.")
        c1, c2 = st.columns(2)
        if c1.button("Excluir", key="ses_del_ok"):
            sessao_id = exclusao_sessao.pendente
            try:
                exclusao_sessao.confirma(api.exclui_sessao)
                st.session_state["sessoes"] = remove_da_lista(sessoes, sessao_id)
                if edicao_sessao.atual == sessao_id:
                    edicao_sessao.fecha()
                st.toast("Agendamento removido com sucesso!")
                st.rerun()
            except NaoAutorizado as e:
                sessao_invalida(e)
            except ErroApi as e:
                st.error(f"Erro ao remover agendamento: {e}")
        if c2.button("Cancelar", key="ses_del_cancel"):
            exclusao_sessao.cancela()
            st.rerun()


# TAB 4 - Avaliações

def formulario_avaliacao(a: Avaliacao, edicao: EdicaoAtual) -> None:
    campos = campos_da_avaliacao(a)
    with st.form(key=f"aval_edit_form_{a.id}"):
        data_aval = st.date_input("Data da avaliação", value=a.data_avaliacao, max_value=agora.date())
        novos = {k: st.text_area(k, value=v or "") for k, v in campos.items()}
        if not campos:
            st.caption("Nenhum campo de texto para editar.")
        b_salvar, b_cancelar = st.columns(2)
        salvar = b_salvar.form_submit_button("Salvar avaliação")
        cancelar = b_cancelar.form_submit_button("Cancelar")

    if cancelar:
        edicao.fecha()
        st.rerun()
    if salvar:
        try:
            nova = valida_avaliacao(a, data_aval, novos)
            edicao.salva(lambda: api.atualiza_avaliacao(a.id, nova))
            st.toast("Avaliação atualizada.")
            st.rerun()
        except ErroValidacao as e:
            st.error(str(e))
        except NaoAutorizado as e:
            sessao_invalida(e)
        except ErroApi as e:
            st.error(f"Erro ao salvar avaliação: {e}")


with tab4:
    st.subheader("Avaliações fisioterapêuticas")

    ids = [c.id for c in clientes]
    cliente_id = st.selectbox(
        "Cliente",
        options=ids,
        index=None,
        format_func=lambda i: nomes.get(i, str(i)),
        placeholder="Selecione um cliente",
        key="aval_cliente",
    )

    if cliente_id is not None:
        try:
            with st.spinner("Carregando avaliações..."):
                avaliacoes = api.lista_avaliacoes_cliente(cliente_id)
        except NaoAutorizado as e:
            sessao_invalida(e)
            avaliacoes = []
        except ErroApi as e:
            st.error(f"Erro ao carregar avaliações: {e}")
            avaliacoes = []

        if st.button("Nova avaliação", key="aval_nova"):
            try:
                api.cria_avaliacao(Avaliacao(cliente_id=cliente_id, data_avaliacao=agora.date()))
                st.toast("Avaliação criada.")
                st.rerun()
            except NaoAutorizado as e:
                sessao_invalida(e)
            except ErroApi as e:
                st.error(f"Erro ao criar avaliação: {e}")

        if not avaliacoes:
            st.info("Nenhuma avaliação para este cliente.")

        exclusao_aval = ConfirmacaoExclusao(st.session_state, "avaliacao")
        edicao_aval = EdicaoAtual(st.session_state, "avaliacao")
        for a in avaliacoes:
            quando = a.data_avaliacao.strftime("%d/%m/%Y") if a.data_avaliacao else "-"
            aberta = a.id is not None and edicao_aval.atual == a.id
            with st.expander(f"Avaliação {a.id or ''} | {quando}", expanded=aberta):
                for extra, valor in (a.model_extra or {}).items():
                    st.write(f"**{extra}**: {valor}")
                st.write("**Evoluções:**")
                for ev in a.evolucoes:
                    st.write(f"- {ev}")

                if a.id is None:
                    st.caption("Avaliação sem id: não pode ser alterada.")
                    continue

                if edicao_aval.atual == a.id:
                    formulario_avaliacao(a, edicao_aval)

                texto = st.text_area("Nova evolução", key=f"aval_ev_{a.id}")
                c1, c2, c3 = st.columns(3)
                if c1.button("Adicionar evolução", key=f"aval_ev_btn_{a.id}"):
                    try:
                        api.adiciona_evolucao(a.id, texto)
                        st.toast("Evolução registrada.")
                        st.rerun()
                    except NaoAutorizado as e:
                        sessao_invalida(e)
                    except ErroApi as e:
                        st.error(str(e))
                if c2.button("Editar avaliação", key=f"aval_edit_{a.id}"):
                    edicao_aval.abre(a.id)
                    st.rerun()
                if c3.button("Excluir avaliação", key=f"aval_del_{a.id}"):
                    exclusao_aval.solicita(a.id)

        if exclusao_aval.pendente is not None:
            st.warning("Excluir avaliação? Esta ação não pode ser desfeita.")
            c1, c2 = st.columns(2)
            if c1.button("Excluir", key="aval_del_ok"):
                try:
                    exclusao_aval.confirma(api.exclui_avaliacao)
                    st.toast("Avaliação excluída.")
                    st.rerun()
                except NaoAutorizado as e:
                    sessao_invalida(e)
                except ErroApi as e:
                    st.error(f"Erro ao excluir avaliação: {e}")
            if c2.button("Cancelar", key="aval_del_cancel"):
                exclusao_aval.cancela()
                st.rerun()
