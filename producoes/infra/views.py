# producoes/infra/views.py
"""
Criação de views auxiliares para consultas frequentes.

Views criadas:
- vw_periodos_resumo:  período + quantidade de produções + soma recalculada
                       (permite conferir o total gravado).
- vw_producoes_detalhe: produção com nomes de cliente, projeto e período.

Obs.:
- As views assumem que as migrações já foram aplicadas.
- Um conjunto de índices úteis também é criado, caso não existam.
"""

from __future__ import annotations

from .db import connect


def create_views(db_path: str) -> None:
    with connect(db_path) as c:
        # -----------------------
        # Views (drop + create)
        # -----------------------
        c.executescript(
            """
            ---------------------------
            -- Resumo de períodos
            -- soma_producoes é REAL apenas para conferência; o valor
            -- oficial é total_periodo (TEXT decimal).
            ---------------------------
            DROP VIEW IF EXISTS vw_periodos_resumo;
            CREATE VIEW vw_periodos_resumo AS
            SELECT
                pe.id,
                pe.cliente_id,
                pe.data_inicio,
                pe.data_fim,
                pe.nome_periodo,
                pe.status,
                pe.total_periodo,
                COUNT(pr.id)                           AS qtd_producoes,
                COALESCE(SUM(CAST(pr.total AS REAL)), 0.0) AS soma_producoes
            FROM periodos pe
            LEFT JOIN producoes pr ON pr.periodo_id = pe.id
            GROUP BY pe.id;

            ---------------------------
            -- Detalhe de produções
            ---------------------------
            DROP VIEW IF EXISTS vw_producoes_detalhe;
            CREATE VIEW vw_producoes_detalhe AS
            SELECT
                pr.*,
                cl.nome         AS cliente_nome,
                pj.nome         AS projeto_nome,
                pe.nome_periodo AS nome_periodo
            FROM producoes pr
            JOIN clientes cl      ON cl.id = pr.cliente_id
            LEFT JOIN projetos pj ON pj.id = pr.projeto_id
            JOIN periodos pe      ON pe.id = pr.periodo_id;
            """
        )

        # --------------------------------
        # Índices úteis (IF NOT EXISTS)
        # --------------------------------
        c.executescript(
            """
            CREATE INDEX IF NOT EXISTS idx_producoes_periodo ON producoes(periodo_id);
            CREATE INDEX IF NOT EXISTS idx_producoes_cliente ON producoes(cliente_id);
            CREATE INDEX IF NOT EXISTS idx_producoes_data    ON producoes(data);
            CREATE INDEX IF NOT EXISTS idx_periodos_cliente  ON periodos(cliente_id, data_inicio);
            CREATE INDEX IF NOT EXISTS idx_projetos_cliente  ON projetos(cliente_id);
            """
        )
