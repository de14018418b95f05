# producoes/infra/migrations.py
"""
Migrações de schema usando PRAGMA user_version.

V1: tabelas base (clientes, projetos, tipos, períodos, produções)
V2: semeia os tipos de produção padrão
"""

from __future__ import annotations

import uuid
from typing import List

from .db import connect
from producoes.domain.models import TIPOS_PADRAO


SCHEMA_V1: List[str] = [
    # Clientes
    """
    CREATE TABLE IF NOT EXISTS clientes (
        id TEXT PRIMARY KEY,
        nome TEXT NOT NULL,
        ativo INTEGER NOT NULL DEFAULT 1,
        created_at TEXT NOT NULL,
        updated_at TEXT NOT NULL
    );
    """,
    # Projetos (agrupamento opcional dentro do cliente)
    """
    CREATE TABLE IF NOT EXISTS projetos (
        id TEXT PRIMARY KEY,
        nome TEXT NOT NULL,
        cliente_id TEXT NOT NULL,
        ativo INTEGER NOT NULL DEFAULT 1,
        created_at TEXT NOT NULL,
        updated_at TEXT NOT NULL,
        FOREIGN KEY (cliente_id) REFERENCES clientes(id)
    );
    """,
    # Tipos de produção (Feed, Story, ...)
    """
    CREATE TABLE IF NOT EXISTS tipos_producao (
        id TEXT PRIMARY KEY,
        nome TEXT NOT NULL UNIQUE,
        ativo INTEGER NOT NULL DEFAULT 1,
        ordem INTEGER NOT NULL DEFAULT 0
    );
    """,
    # Períodos 21 -> 20; um único por (cliente, início, fim)
    """
    CREATE TABLE IF NOT EXISTS periodos (
        id TEXT PRIMARY KEY,
        cliente_id TEXT NOT NULL,
        data_inicio TEXT NOT NULL,
        data_fim TEXT NOT NULL,
        nome_periodo TEXT NOT NULL,
        status TEXT NOT NULL DEFAULT 'Aberto',  -- 'Aberto' | 'Fechado'
        total_periodo TEXT NOT NULL DEFAULT '0.00',
        created_at TEXT NOT NULL,
        updated_at TEXT NOT NULL,
        UNIQUE (cliente_id, data_inicio, data_fim),
        FOREIGN KEY (cliente_id) REFERENCES clientes(id)
    );
    """,
    # Produções (valores monetários como TEXT decimal)
    """
    CREATE TABLE IF NOT EXISTS producoes (
        id TEXT PRIMARY KEY,
        data TEXT NOT NULL,
        cliente_id TEXT NOT NULL,
        projeto_id TEXT,
        tipo TEXT NOT NULL,
        nome_producao TEXT NOT NULL,
        quantidade INTEGER NOT NULL,
        valor_unitario TEXT NOT NULL,
        total TEXT NOT NULL,
        periodo_id TEXT NOT NULL,
        status TEXT NOT NULL DEFAULT 'Aberto',
        observacoes TEXT,
        created_at TEXT NOT NULL,
        updated_at TEXT NOT NULL,
        FOREIGN KEY (cliente_id) REFERENCES clientes(id),
        FOREIGN KEY (projeto_id) REFERENCES projetos(id),
        FOREIGN KEY (periodo_id) REFERENCES periodos(id)
    );
    """,
]


def _apply_v1(conn) -> None:
    for sql in SCHEMA_V1:
        conn.executescript(sql)


def _apply_v2(conn) -> None:
    existentes = {r[0] for r in conn.execute("SELECT nome FROM tipos_producao;").fetchall()}
    for ordem, nome in enumerate(TIPOS_PADRAO):
        if nome in existentes:
            continue
        conn.execute(
            "INSERT INTO tipos_producao (id, nome, ativo, ordem) VALUES (?, ?, 1, ?)",
            (str(uuid.uuid4()), nome, ordem),
        )


def apply_migrations(db_path: str) -> None:
    """Aplica migrações incrementais de acordo com PRAGMA user_version."""
    with connect(db_path) as conn:
        ver = conn.execute("PRAGMA user_version;").fetchone()[0] or 0

        if ver < 1:
            _apply_v1(conn)
            conn.execute("PRAGMA user_version = 1;")
            ver = 1

        if ver < 2:
            _apply_v2(conn)
            conn.execute("PRAGMA user_version = 2;")
            ver = 2
