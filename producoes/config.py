# producoes/config.py
"""
Configurações globais e valores padrão do ledger de produções.
"""

import os
from dataclasses import dataclass


# Caminho padrão do banco de dados SQLite
DB_PATH = os.environ.get("PRODUCOES_DB") or os.path.join(os.getcwd(), "producoes.db")


@dataclass
class DefaultConfig:
    """Valores padrão para parâmetros do sistema."""
    papel_padrao: str = "admin"
    # Quando True, editar a data de uma produção a move para o período da nova data
    reagrupar_ao_editar_data: bool = False
    formato_data: str = "%d/%m/%Y"  # rótulo do período (pt-BR)


# Instância global dos valores padrão
DEFAULTS = DefaultConfig()
