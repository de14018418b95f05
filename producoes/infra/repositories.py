"""
Repositórios (DAO) para acesso e manipulação de dados no SQLite.

Classes:
- ClienteRepo
- ProjetoRepo
- TipoProducaoRepo
- PeriodoRepo
- ProducaoRepo

Cada repositório abre sua própria conexão por operação, a menos que
receba uma conexão já aberta em ``conn``: nesse caso todas as operações
participam da transação de quem chamou (usado pelos casos de uso que
precisam gravar produção e total do período de forma atômica).
"""

from __future__ import annotations

import sqlite3
from dataclasses import asdict, is_dataclass
from decimal import Decimal
from typing import Any, ContextManager, Dict, List, Optional

from .db import transacao


# -------------------------
# Helpers
# -------------------------

def _as_dict(row: Any) -> Dict[str, Any]:
    if isinstance(row, dict):
        return dict(row)
    if is_dataclass(row):
        return asdict(row)
    raise TypeError("row must be dict or dataclass")


def _to_db(row: Dict[str, Any]) -> Dict[str, Any]:
    """Decimal -> TEXT e bool -> 0/1 antes de gravar."""
    out = {}
    for k, v in row.items():
        if isinstance(v, Decimal):
            out[k] = str(v)
        elif isinstance(v, bool):
            out[k] = int(v)
        else:
            out[k] = v
    return out


def _fetchall(cur) -> List[Dict[str, Any]]:
    cols = [d[0] for d in cur.description]
    return [dict(zip(cols, row)) for row in cur.fetchall()]


def _fetchone(cur) -> Optional[Dict[str, Any]]:
    cols = [d[0] for d in cur.description]
    row = cur.fetchone()
    return dict(zip(cols, row)) if row else None


class _BaseRepo:
    def __init__(self, db_path: str, conn: Optional[sqlite3.Connection] = None):
        self.db_path = db_path
        self.conn = conn

    def _connect(self) -> ContextManager[sqlite3.Connection]:
        return transacao(self.db_path, self.conn)


# -------------------------
# Clientes
# -------------------------

class ClienteRepo(_BaseRepo):
    def insert(self, row: Dict[str, Any]) -> None:
        with self._connect() as c:
            c.execute(
                """
                INSERT INTO clientes (id, nome, ativo, created_at, updated_at)
                VALUES (:id, :nome, :ativo, :created_at, :updated_at)
                """,
                _to_db(_as_dict(row)),
            )

    def update(self, id: str, nome: str, ativo: bool, updated_at: str) -> int:
        with self._connect() as c:
            cur = c.execute(
                "UPDATE clientes SET nome = ?, ativo = ?, updated_at = ? WHERE id = ?",
                (nome, int(ativo), updated_at, id),
            )
            return cur.rowcount

    def delete(self, id: str) -> int:
        with self._connect() as c:
            return c.execute("DELETE FROM clientes WHERE id = ?", (id,)).rowcount

    def get(self, id: str) -> Optional[Dict[str, Any]]:
        with self._connect() as c:
            return _fetchone(c.execute("SELECT * FROM clientes WHERE id = ?", (id,)))

    def get_all(self) -> List[Dict[str, Any]]:
        with self._connect() as c:
            return _fetchall(c.execute("SELECT * FROM clientes ORDER BY nome"))

    def em_uso(self, id: str) -> bool:
        """Há produções (ou períodos) referenciando o cliente?"""
        with self._connect() as c:
            row = c.execute(
                """
                SELECT 1 FROM producoes WHERE cliente_id = :id
                UNION ALL
                SELECT 1 FROM periodos WHERE cliente_id = :id
                LIMIT 1
                """,
                {"id": id},
            ).fetchone()
            return row is not None


# -------------------------
# Projetos
# -------------------------

class ProjetoRepo(_BaseRepo):
    def insert(self, row: Dict[str, Any]) -> None:
        with self._connect() as c:
            c.execute(
                """
                INSERT INTO projetos (id, nome, cliente_id, ativo, created_at, updated_at)
                VALUES (:id, :nome, :cliente_id, :ativo, :created_at, :updated_at)
                """,
                _to_db(_as_dict(row)),
            )

    def update(self, id: str, nome: str, ativo: bool, updated_at: str) -> int:
        with self._connect() as c:
            cur = c.execute(
                "UPDATE projetos SET nome = ?, ativo = ?, updated_at = ? WHERE id = ?",
                (nome, int(ativo), updated_at, id),
            )
            return cur.rowcount

    def delete(self, id: str) -> int:
        with self._connect() as c:
            return c.execute("DELETE FROM projetos WHERE id = ?", (id,)).rowcount

    def get(self, id: str) -> Optional[Dict[str, Any]]:
        with self._connect() as c:
            return _fetchone(c.execute("SELECT * FROM projetos WHERE id = ?", (id,)))

    def get_all(self) -> List[Dict[str, Any]]:
        with self._connect() as c:
            return _fetchall(c.execute("SELECT * FROM projetos ORDER BY nome"))

    def em_uso(self, id: str) -> bool:
        with self._connect() as c:
            row = c.execute("SELECT 1 FROM producoes WHERE projeto_id = ? LIMIT 1", (id,)).fetchone()
            return row is not None


# -------------------------
# Tipos de produção
# -------------------------

class TipoProducaoRepo(_BaseRepo):
    def insert(self, row: Dict[str, Any]) -> None:
        with self._connect() as c:
            c.execute(
                "INSERT INTO tipos_producao (id, nome, ativo, ordem) VALUES (:id, :nome, :ativo, :ordem)",
                _to_db(_as_dict(row)),
            )

    def update(self, id: str, nome: str, ativo: bool) -> int:
        with self._connect() as c:
            cur = c.execute(
                "UPDATE tipos_producao SET nome = ?, ativo = ? WHERE id = ?",
                (nome, int(ativo), id),
            )
            return cur.rowcount

    def delete(self, id: str) -> int:
        with self._connect() as c:
            return c.execute("DELETE FROM tipos_producao WHERE id = ?", (id,)).rowcount

    def get(self, id: str) -> Optional[Dict[str, Any]]:
        with self._connect() as c:
            return _fetchone(c.execute("SELECT * FROM tipos_producao WHERE id = ?", (id,)))

    def get_all(self) -> List[Dict[str, Any]]:
        with self._connect() as c:
            return _fetchall(c.execute("SELECT * FROM tipos_producao ORDER BY ordem, nome"))

    def proxima_ordem(self) -> int:
        with self._connect() as c:
            return int(c.execute("SELECT COALESCE(MAX(ordem), -1) + 1 FROM tipos_producao").fetchone()[0])

    def em_uso(self, nome: str) -> bool:
        with self._connect() as c:
            row = c.execute("SELECT 1 FROM producoes WHERE tipo = ? LIMIT 1", (nome,)).fetchone()
            return row is not None


# -------------------------
# Períodos
# -------------------------

class PeriodoRepo(_BaseRepo):
    def get(self, id: str) -> Optional[Dict[str, Any]]:
        with self._connect() as c:
            return _fetchone(c.execute("SELECT * FROM periodos WHERE id = ?", (id,)))

    def find(self, cliente_id: str, data_inicio: str, data_fim: str) -> Optional[Dict[str, Any]]:
        with self._connect() as c:
            return _fetchone(
                c.execute(
                    """
                    SELECT * FROM periodos
                    WHERE cliente_id = ? AND data_inicio = ? AND data_fim = ?
                    """,
                    (cliente_id, data_inicio, data_fim),
                )
            )

    def insert_if_absent(self, row: Dict[str, Any]) -> Dict[str, Any]:
        """Insere o período; se a fronteira já existir, devolve o existente."""
        row = _to_db(_as_dict(row))
        with self._connect() as c:
            c.execute(
                """
                INSERT INTO periodos
                    (id, cliente_id, data_inicio, data_fim, nome_periodo,
                     status, total_periodo, created_at, updated_at)
                VALUES
                    (:id, :cliente_id, :data_inicio, :data_fim, :nome_periodo,
                     :status, :total_periodo, :created_at, :updated_at)
                ON CONFLICT(cliente_id, data_inicio, data_fim) DO NOTHING
                """,
                row,
            )
            return _fetchone(
                c.execute(
                    "SELECT * FROM periodos WHERE cliente_id = ? AND data_inicio = ? AND data_fim = ?",
                    (row["cliente_id"], row["data_inicio"], row["data_fim"]),
                )
            )

    def set_status(self, id: str, status: str, updated_at: str) -> int:
        with self._connect() as c:
            cur = c.execute(
                "UPDATE periodos SET status = ?, updated_at = ? WHERE id = ?",
                (status, updated_at, id),
            )
            return cur.rowcount

    def set_total(self, id: str, total: Decimal, updated_at: str) -> int:
        with self._connect() as c:
            cur = c.execute(
                "UPDATE periodos SET total_periodo = ?, updated_at = ? WHERE id = ?",
                (str(total), updated_at, id),
            )
            return cur.rowcount

    def get_all(self) -> List[Dict[str, Any]]:
        with self._connect() as c:
            return _fetchall(c.execute("SELECT * FROM periodos ORDER BY data_inicio DESC"))

    def resumo(self) -> List[Dict[str, Any]]:
        """Linhas de ``vw_periodos_resumo`` (conferência de totais)."""
        with self._connect() as c:
            return _fetchall(c.execute("SELECT * FROM vw_periodos_resumo ORDER BY data_inicio DESC"))


# -------------------------
# Produções
# -------------------------

_COLS_PRODUCAO = (
    "id, data, cliente_id, projeto_id, tipo, nome_producao, quantidade, "
    "valor_unitario, total, periodo_id, status, observacoes, created_at, updated_at"
)

# Colunas aceitas como filtro em detalhe(); nomes entram no SQL, valores não
_FILTROS_DETALHE = ("cliente_id", "projeto_id", "tipo", "periodo_id", "status")


class ProducaoRepo(_BaseRepo):
    def insert(self, row: Dict[str, Any]) -> None:
        with self._connect() as c:
            c.execute(
                f"""
                INSERT INTO producoes ({_COLS_PRODUCAO})
                VALUES
                    (:id, :data, :cliente_id, :projeto_id, :tipo, :nome_producao, :quantidade,
                     :valor_unitario, :total, :periodo_id, :status, :observacoes,
                     :created_at, :updated_at)
                """,
                _to_db(_as_dict(row)),
            )

    def update(self, row: Dict[str, Any]) -> int:
        """Regrava os campos editáveis. ``status`` e ``created_at`` não mudam aqui."""
        with self._connect() as c:
            cur = c.execute(
                """
                UPDATE producoes SET
                    data = :data,
                    cliente_id = :cliente_id,
                    projeto_id = :projeto_id,
                    tipo = :tipo,
                    nome_producao = :nome_producao,
                    quantidade = :quantidade,
                    valor_unitario = :valor_unitario,
                    total = :total,
                    periodo_id = :periodo_id,
                    observacoes = :observacoes,
                    updated_at = :updated_at
                WHERE id = :id
                """,
                _to_db(_as_dict(row)),
            )
            return cur.rowcount

    def delete(self, id: str) -> int:
        with self._connect() as c:
            return c.execute("DELETE FROM producoes WHERE id = ?", (id,)).rowcount

    def get(self, id: str) -> Optional[Dict[str, Any]]:
        with self._connect() as c:
            return _fetchone(c.execute(f"SELECT {_COLS_PRODUCAO} FROM producoes WHERE id = ?", (id,)))

    def por_periodo(self, periodo_id: str) -> List[Dict[str, Any]]:
        with self._connect() as c:
            return _fetchall(
                c.execute(
                    f"""
                    SELECT {_COLS_PRODUCAO} FROM producoes
                    WHERE periodo_id = ?
                    ORDER BY data DESC, created_at DESC
                    """,
                    (periodo_id,),
                )
            )

    def get_all(self) -> List[Dict[str, Any]]:
        with self._connect() as c:
            return _fetchall(
                c.execute(f"SELECT {_COLS_PRODUCAO} FROM producoes ORDER BY data DESC, created_at DESC")
            )

    def detalhe(self, filtros: Optional[Dict[str, Any]] = None) -> List[Dict[str, Any]]:
        """Linhas de ``vw_producoes_detalhe`` (com nomes de cliente/projeto).

        ``filtros`` mapeia coluna -> valor exigido (ex.: ``{"tipo": "Feed"}``).
        """
        sql = "SELECT * FROM vw_producoes_detalhe"
        args: List[Any] = []
        filtros = {k: v for k, v in (filtros or {}).items() if k in _FILTROS_DETALHE and v}
        if filtros:
            sql += " WHERE " + " AND ".join(f"{k} = ?" for k in filtros)
            args.extend(filtros.values())
        sql += " ORDER BY data DESC, created_at DESC"
        with self._connect() as c:
            return _fetchall(c.execute(sql, args))

    def totais_do_periodo(self, periodo_id: str) -> List[Decimal]:
        with self._connect() as c:
            rows = c.execute("SELECT total FROM producoes WHERE periodo_id = ?", (periodo_id,)).fetchall()
            return [Decimal(str(r[0])) for r in rows]

    def set_status_por_periodo(self, periodo_id: str, status: str, updated_at: str) -> int:
        with self._connect() as c:
            cur = c.execute(
                "UPDATE producoes SET status = ?, updated_at = ? WHERE periodo_id = ?",
                (status, updated_at, periodo_id),
            )
            return cur.rowcount
