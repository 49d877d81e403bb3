"""
Front-end da Clínica Fisio.

Estrutura:
- config.py       : configuração via ambiente / .env e logging
- errors.py       : erros da camada de API
- models.py       : modelos pydantic (sessões, clientes, avaliações) e enums
- normalizacao.py : parser do campo id do cliente nas respostas
- auth.py         : contexto de autenticação (token bearer)
- api.py          : cliente HTTP para o backend REST
- agenda.py       : filtro, agrupamento por dia e rótulos da agenda
- clientes.py     : derivações da lista de clientes (idade, nomes, telefone)
- formularios.py  : valores padrão e validação do formulário de sessão
- estado.py       : estado da tela (confirmação de exclusão, atualização)
- cli.py          : agenda e clientes pelo terminal
"""
