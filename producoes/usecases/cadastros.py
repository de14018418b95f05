# producoes/usecases/cadastros.py
"""
UC: Cadastros de referência (clientes, projetos e tipos de produção).

São entidades simples: criar, renomear, ativar/desativar e excluir.
A exclusão só é permitida quando nenhuma produção referencia o registro;
caso contrário o caminho é desativar.
"""

from __future__ import annotations

import uuid
from typing import Any

from producoes.config import DB_PATH
from producoes.domain.erros import ErroValidacao, NaoEncontrado, RegistroEmUso
from producoes.domain.models import Cliente, Projeto, TipoProducao
from producoes.infra.db import transacao
from producoes.infra.repositories import ClienteRepo, ProjetoRepo, TipoProducaoRepo
from producoes.infra.logger import log_database_operation, log_system_event


def _nome(nome: Any, rotulo: str) -> str:
    s = "" if nome is None else str(nome).strip()
    if not s:
        raise ErroValidacao(f"Nome do {rotulo} é obrigatório")
    return s


# -------------------------
# Clientes
# -------------------------

def adicionar_cliente(nome: str, agora: str, db_path: str = DB_PATH) -> Cliente:
    cliente = Cliente(id=str(uuid.uuid4()), nome=_nome(nome, "cliente"), ativo=True,
                      created_at=agora, updated_at=agora)
    ClienteRepo(db_path).insert(cliente)
    log_database_operation("clientes", "INSERT", 1, cliente_id=cliente.id, nome=cliente.nome)
    return cliente


def atualizar_cliente(cliente_id: str, nome: str, ativo: bool, agora: str, db_path: str = DB_PATH) -> Cliente:
    repo = ClienteRepo(db_path)
    if not repo.update(cliente_id, _nome(nome, "cliente"), ativo, agora):
        raise NaoEncontrado("Cliente não encontrado")
    log_database_operation("clientes", "UPDATE", 1, cliente_id=cliente_id, ativo=ativo)
    return Cliente.from_row(repo.get(cliente_id))


def excluir_cliente(cliente_id: str, db_path: str = DB_PATH) -> None:
    with transacao(db_path) as c:
        repo = ClienteRepo(db_path, c)
        if repo.get(cliente_id) is None:
            raise NaoEncontrado("Cliente não encontrado")
        if repo.em_uso(cliente_id):
            log_system_event("excluir_cliente_em_uso", {"cliente_id": cliente_id}, level="warning")
            raise RegistroEmUso("Cliente possui produções ou períodos; desative-o em vez de excluir")
        # projetos sem produções saem junto com o cliente
        projetos = ProjetoRepo(db_path, c)
        for p in projetos.get_all():
            if p["cliente_id"] == cliente_id:
                projetos.delete(p["id"])
        repo.delete(cliente_id)
    log_database_operation("clientes", "DELETE", 1, cliente_id=cliente_id)


# -------------------------
# Projetos
# -------------------------

def adicionar_projeto(nome: str, cliente_id: str, agora: str, db_path: str = DB_PATH) -> Projeto:
    nome = _nome(nome, "projeto")
    if ClienteRepo(db_path).get(cliente_id) is None:
        raise NaoEncontrado("Cliente não encontrado")
    projeto = Projeto(id=str(uuid.uuid4()), nome=nome, cliente_id=cliente_id, ativo=True,
                      created_at=agora, updated_at=agora)
    ProjetoRepo(db_path).insert(projeto)
    log_database_operation("projetos", "INSERT", 1, projeto_id=projeto.id, cliente_id=cliente_id)
    return projeto


def atualizar_projeto(projeto_id: str, nome: str, ativo: bool, agora: str, db_path: str = DB_PATH) -> Projeto:
    repo = ProjetoRepo(db_path)
    if not repo.update(projeto_id, _nome(nome, "projeto"), ativo, agora):
        raise NaoEncontrado("Projeto não encontrado")
    log_database_operation("projetos", "UPDATE", 1, projeto_id=projeto_id, ativo=ativo)
    return Projeto.from_row(repo.get(projeto_id))


def excluir_projeto(projeto_id: str, db_path: str = DB_PATH) -> None:
    repo = ProjetoRepo(db_path)
    if repo.get(projeto_id) is None:
        raise NaoEncontrado("Projeto não encontrado")
    if repo.em_uso(projeto_id):
        raise RegistroEmUso("Projeto possui produções; desative-o em vez de excluir")
    repo.delete(projeto_id)
    log_database_operation("projetos", "DELETE", 1, projeto_id=projeto_id)


# -------------------------
# Tipos de produção
# -------------------------

def adicionar_tipo(nome: str, db_path: str = DB_PATH) -> TipoProducao:
    nome = _nome(nome, "tipo")
    repo = TipoProducaoRepo(db_path)
    if any(t["nome"].lower() == nome.lower() for t in repo.get_all()):
        raise ErroValidacao(f"Tipo '{nome}' já existe")
    tipo = TipoProducao(id=str(uuid.uuid4()), nome=nome, ativo=True, ordem=repo.proxima_ordem())
    repo.insert(tipo)
    log_database_operation("tipos_producao", "INSERT", 1, nome=nome)
    return tipo


def atualizar_tipo(tipo_id: str, nome: str, ativo: bool, db_path: str = DB_PATH) -> TipoProducao:
    repo = TipoProducaoRepo(db_path)
    atual = repo.get(tipo_id)
    if atual is None:
        raise NaoEncontrado("Tipo de produção não encontrado")
    nome = _nome(nome, "tipo")
    # produções guardam o nome do tipo; renomear quebraria o agrupamento
    if nome != atual["nome"] and repo.em_uso(atual["nome"]):
        raise RegistroEmUso("Tipo possui produções; não pode ser renomeado")
    repo.update(tipo_id, nome, ativo)
    log_database_operation("tipos_producao", "UPDATE", 1, tipo_id=tipo_id, ativo=ativo)
    return TipoProducao.from_row(repo.get(tipo_id))


def excluir_tipo(tipo_id: str, db_path: str = DB_PATH) -> None:
    repo = TipoProducaoRepo(db_path)
    atual = repo.get(tipo_id)
    if atual is None:
        raise NaoEncontrado("Tipo de produção não encontrado")
    if repo.em_uso(atual["nome"]):
        raise RegistroEmUso("Tipo possui produções; desative-o em vez de excluir")
    repo.delete(tipo_id)
    log_database_operation("tipos_producao", "DELETE", 1, tipo_id=tipo_id)
