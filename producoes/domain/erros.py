"""
Taxonomia de falhas do ledger.

Dentro dos casos de uso as falhas circulam como exceções derivadas de
``ErroLedger``. Na fronteira da fachada elas viram um ``Resultado``
tipado; nenhuma exceção atravessa essa fronteira.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import TYPE_CHECKING, List, Optional, Sequence, Union

if TYPE_CHECKING:
    from producoes.domain.models import Periodo, Producao


class Motivo(str, Enum):
    VALIDACAO = "VALIDACAO"
    PERIODO_FECHADO = "PERIODO_FECHADO"
    EDICAO_BLOQUEADA = "EDICAO_BLOQUEADA"
    JA_FECHADO = "JA_FECHADO"
    JA_ABERTO = "JA_ABERTO"
    NAO_ENCONTRADO = "NAO_ENCONTRADO"
    PERMISSAO_NEGADA = "PERMISSAO_NEGADA"
    EM_USO = "EM_USO"
    PERSISTENCIA = "PERSISTENCIA"


class ErroLedger(Exception):
    """Base das falhas de negócio. Carrega um motivo e as mensagens."""
    motivo: Motivo = Motivo.VALIDACAO

    def __init__(self, mensagens: Union[str, Sequence[str]]):
        if isinstance(mensagens, str):
            mensagens = [mensagens]
        self.mensagens: List[str] = list(mensagens)
        super().__init__("; ".join(self.mensagens))


class ErroValidacao(ErroLedger):
    motivo = Motivo.VALIDACAO


class PeriodoFechado(ErroLedger):
    motivo = Motivo.PERIODO_FECHADO


class EdicaoBloqueada(ErroLedger):
    motivo = Motivo.EDICAO_BLOQUEADA


class PeriodoJaFechado(ErroLedger):
    motivo = Motivo.JA_FECHADO


class PeriodoJaAberto(ErroLedger):
    motivo = Motivo.JA_ABERTO


class NaoEncontrado(ErroLedger):
    motivo = Motivo.NAO_ENCONTRADO


class PermissaoNegada(ErroLedger):
    motivo = Motivo.PERMISSAO_NEGADA


class RegistroEmUso(ErroLedger):
    motivo = Motivo.EM_USO


@dataclass
class Resultado:
    """Resultado de uma operação de escrita exposta pela fachada."""
    success: bool
    errors: List[str] = field(default_factory=list)
    motivo: Optional[Motivo] = None
    producao: Optional["Producao"] = None
    periodo: Optional["Periodo"] = None
    registro: Optional[object] = None

    @property
    def error(self) -> Optional[str]:
        return "; ".join(self.errors) if self.errors else None

    @classmethod
    def ok(cls, **kwargs) -> "Resultado":
        return cls(success=True, **kwargs)

    @classmethod
    def falha(cls, motivo: Motivo, mensagens: Union[str, Sequence[str]]) -> "Resultado":
        if isinstance(mensagens, str):
            mensagens = [mensagens]
        return cls(success=False, errors=list(mensagens), motivo=motivo)

    @classmethod
    def de_erro(cls, exc: ErroLedger) -> "Resultado":
        return cls.falha(exc.motivo, exc.mensagens)
