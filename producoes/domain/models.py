# producoes/domain/models.py
"""
Modelos (dataclasses) do domínio.

Observação importante:
- Os repositórios trabalham com dicionários (linhas do SQLite); as
  dataclasses são montadas a partir deles com ``from_row`` e usadas pelas
  regras de negócio e pela fachada.
- Valores monetários são sempre ``Decimal``.
"""

from __future__ import annotations

from dataclasses import asdict, dataclass, field
from decimal import Decimal
from typing import Any, Dict, List, Optional


STATUS_ABERTO = "Aberto"
STATUS_FECHADO = "Fechado"

PAPEL_ADMIN = "admin"
PAPEL_VIEWER = "viewer"

# Tipos semeados na migração; o administrador pode cadastrar outros.
TIPOS_PADRAO: List[str] = ["Feed", "Story", "Reels", "Vídeo", "Logo", "Outro"]


def _dec(v: Any) -> Decimal:
    if v is None or v == "":
        return Decimal("0")
    return Decimal(str(v))


def _bool(v: Any) -> bool:
    return bool(int(v)) if v is not None else False


@dataclass
class Cliente:
    id: str
    nome: str
    ativo: bool = True
    created_at: str = ""
    updated_at: str = ""

    @classmethod
    def from_row(cls, row: Dict[str, Any]) -> "Cliente":
        return cls(
            id=row["id"],
            nome=row["nome"],
            ativo=_bool(row.get("ativo")),
            created_at=row.get("created_at") or "",
            updated_at=row.get("updated_at") or "",
        )


@dataclass
class Projeto:
    id: str
    nome: str
    cliente_id: str
    ativo: bool = True
    created_at: str = ""
    updated_at: str = ""

    @classmethod
    def from_row(cls, row: Dict[str, Any]) -> "Projeto":
        return cls(
            id=row["id"],
            nome=row["nome"],
            cliente_id=row["cliente_id"],
            ativo=_bool(row.get("ativo")),
            created_at=row.get("created_at") or "",
            updated_at=row.get("updated_at") or "",
        )


@dataclass
class TipoProducao:
    """Categoria de produção; serve apenas para agrupamento/relatórios."""
    id: str
    nome: str
    ativo: bool = True
    ordem: int = 0

    @classmethod
    def from_row(cls, row: Dict[str, Any]) -> "TipoProducao":
        return cls(
            id=row["id"],
            nome=row["nome"],
            ativo=_bool(row.get("ativo")),
            ordem=int(row.get("ordem") or 0),
        )


@dataclass
class Periodo:
    """Período 21 → 20 de um cliente."""
    id: str
    cliente_id: str
    data_inicio: str
    data_fim: str
    nome_periodo: str
    status: str = STATUS_ABERTO
    total_periodo: Decimal = Decimal("0")
    created_at: str = ""
    updated_at: str = ""

    @property
    def fechado(self) -> bool:
        return self.status == STATUS_FECHADO

    @classmethod
    def from_row(cls, row: Dict[str, Any]) -> "Periodo":
        return cls(
            id=row["id"],
            cliente_id=row["cliente_id"],
            data_inicio=row["data_inicio"],
            data_fim=row["data_fim"],
            nome_periodo=row["nome_periodo"],
            status=row.get("status") or STATUS_ABERTO,
            total_periodo=_dec(row.get("total_periodo")),
            created_at=row.get("created_at") or "",
            updated_at=row.get("updated_at") or "",
        )


@dataclass
class Producao:
    """Uma linha faturável de trabalho criativo."""
    id: str
    data: str
    cliente_id: str
    tipo: str
    nome_producao: str
    quantidade: int
    valor_unitario: Decimal
    total: Decimal
    periodo_id: str
    status: str = STATUS_ABERTO
    projeto_id: Optional[str] = None
    observacoes: Optional[str] = None
    created_at: str = ""
    updated_at: str = ""

    @property
    def fechada(self) -> bool:
        return self.status == STATUS_FECHADO

    @classmethod
    def from_row(cls, row: Dict[str, Any]) -> "Producao":
        return cls(
            id=row["id"],
            data=row["data"],
            cliente_id=row["cliente_id"],
            tipo=row["tipo"],
            nome_producao=row["nome_producao"],
            quantidade=int(row["quantidade"]),
            valor_unitario=_dec(row.get("valor_unitario")),
            total=_dec(row.get("total")),
            periodo_id=row["periodo_id"],
            status=row.get("status") or STATUS_ABERTO,
            projeto_id=row.get("projeto_id") or None,
            observacoes=row.get("observacoes") or None,
            created_at=row.get("created_at") or "",
            updated_at=row.get("updated_at") or "",
        )


@dataclass
class ProducaoForm:
    """Dados do formulário de produção, como chegam da interface.

    Os campos numéricos podem vir como texto; a validação converte.
    """
    data: Any = ""
    cliente_id: str = ""
    tipo: str = ""
    nome_producao: str = ""
    quantidade: Any = ""
    valor_unitario: Any = ""
    projeto_id: str = ""
    observacoes: str = ""

    @classmethod
    def from_producao(cls, p: Producao, data: Optional[str] = None) -> "ProducaoForm":
        return cls(
            data=data or p.data,
            cliente_id=p.cliente_id,
            tipo=p.tipo,
            nome_producao=p.nome_producao,
            quantidade=p.quantidade,
            valor_unitario=p.valor_unitario,
            projeto_id=p.projeto_id or "",
            observacoes=p.observacoes or "",
        )


@dataclass
class FiltroProducoes:
    """Filtros da listagem de produções. Campo vazio não filtra."""
    cliente_id: Optional[str] = None
    projeto_id: Optional[str] = None
    tipo: Optional[str] = None
    periodo_id: Optional[str] = None
    status: Optional[str] = None

    def ativos(self) -> Dict[str, str]:
        return {k: v for k, v in asdict(self).items() if v}

    def aceita(self, p: Producao) -> bool:
        return all(getattr(p, campo) == valor for campo, valor in self.ativos().items())


@dataclass
class EstadoLedger:
    """Visão materializada de todos os registros (cache local da fachada)."""
    clientes: List[Cliente] = field(default_factory=list)
    projetos: List[Projeto] = field(default_factory=list)
    tipos: List[TipoProducao] = field(default_factory=list)
    periodos: List[Periodo] = field(default_factory=list)
    producoes: List[Producao] = field(default_factory=list)
