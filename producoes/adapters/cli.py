# producoes/adapters/cli.py
"""
CLI do ledger de produções (Typer).

Comandos principais:
- migrate                               -> aplica migrações e cria views
- cliente add/list/edit/rm              -> cadastro de clientes
- projeto add/list/edit/rm              -> cadastro de projetos
- tipo add/list/edit/rm                 -> tipos de produção
- producao add/edit/rm/dup/list         -> lançamentos de produção (list com filtros)
- producao pode-editar <id>             -> consulta a trava de mesmo dia
- periodo list/show/resumo              -> consulta de períodos
- periodo fechar/reabrir/recalcular     -> ciclo de vida do período
- periodo exportar <id> <xlsx>          -> planilha do período
- periodo conferencia                   -> total gravado x soma das produções
- painel                                -> indicadores do dia e dos períodos abertos

Toda escrita passa pelo LedgerService e recebe ``--papel``; só ``admin``
grava. Falhas são impressas em vermelho e o comando sai com código 1.
"""

from __future__ import annotations

import dataclasses
from datetime import datetime
from decimal import Decimal
from typing import Any, Dict, List, Optional

import typer
from rich.console import Console
from rich.table import Table
from rich.panel import Panel
from rich import box

from producoes.config import DB_PATH, DEFAULTS
from producoes.domain.erros import ErroLedger, Resultado
from producoes.domain.models import STATUS_FECHADO, FiltroProducoes, ProducaoForm
from producoes.infra.migrations import apply_migrations
from producoes.infra.views import create_views
from producoes.usecases.ledger_service import LedgerService
from producoes.usecases.relatorios import conferencia_totais, listar_producoes_detalhe, resumo_periodo
from producoes.adapters.exportacao import exportar_periodo_xlsx


app = typer.Typer(help="Ledger de Produções — CLI")
console = Console()

DB_OPTION = typer.Option(DB_PATH, "--db", help="Caminho do SQLite")
PAPEL_OPTION = typer.Option(DEFAULTS.papel_padrao, "--papel", help="Papel do usuário (admin | viewer)")


# -----------------------
# util
# -----------------------

def brl(valor: Any) -> str:
    """Formata em reais: R$ 1.234,56."""
    v = Decimal(str(valor or 0))
    return "R$ " + f"{v:,.2f}".replace(",", "X").replace(".", ",").replace("X", ".")


def _data_br(iso: str) -> str:
    if not iso:
        return ""
    return datetime.strptime(iso[:10], "%Y-%m-%d").strftime(DEFAULTS.formato_data)


def _preparar(db_path: str) -> None:
    apply_migrations(db_path)
    create_views(db_path)


def _service(db_path: str) -> LedgerService:
    return LedgerService(db_path=db_path)


def _falhar(mensagens: List[str]) -> None:
    for msg in mensagens:
        console.print(f"[bold red]✗ {msg}[/]")
    raise typer.Exit(code=1)


def _checar(res: Resultado) -> Resultado:
    if not res.success:
        _falhar(res.errors)
    return res


def _display_table(data: List[Dict[str, Any]], title: str = "Resultado") -> None:
    """Exibe uma lista de dicionários em tabela Rich."""
    if not data:
        console.print(Panel("Nenhum dado encontrado", title=title, border_style="yellow"))
        return

    table = Table(title=title, box=box.ROUNDED)
    columns = list(data[0].keys())
    for column in columns:
        if column.lower() == "id":
            table.add_column(column, no_wrap=True)
        elif column.lower() in ["quantidade", "itens", "valor", "total", "percentual"]:
            table.add_column(column, justify="right")
        elif column.lower() in ["data", "inicio", "fim"]:
            table.add_column(column, justify="center")
        else:
            table.add_column(column)

    for row in data:
        values = []
        for col in columns:
            val = row.get(col, "")
            if isinstance(val, Decimal):
                values.append(brl(val))
            elif col == "status" and val == STATUS_FECHADO:
                values.append(f"[bold red]{val}[/]")
            elif col == "status":
                values.append(f"[bold green]{val}[/]")
            elif val is None:
                values.append("")
            else:
                values.append(str(val))
        table.add_row(*values)

    console.print(table)


def _display_registro(campos: Dict[str, Any], title: str) -> None:
    table = Table(title=title, box=box.ROUNDED)
    table.add_column("Campo")
    table.add_column("Valor")
    for chave, valor in campos.items():
        if valor is None or valor == "":
            continue
        table.add_row(chave, brl(valor) if isinstance(valor, Decimal) else str(valor))
    console.print(table)


def _campos_producao(svc: LedgerService, p) -> Dict[str, Any]:
    cliente = svc.get_cliente(p.cliente_id)
    projeto = svc.get_projeto(p.projeto_id) if p.projeto_id else None
    periodo = svc.get_periodo(p.periodo_id)
    return {
        "ID": p.id,
        "Data": _data_br(p.data),
        "Cliente": cliente.nome if cliente else p.cliente_id,
        "Projeto": projeto.nome if projeto else None,
        "Tipo": p.tipo,
        "Produção": p.nome_producao,
        "Quantidade": p.quantidade,
        "Valor unitário": p.valor_unitario,
        "Total": p.total,
        "Período": periodo.nome_periodo if periodo else p.periodo_id,
        "Total do período": periodo.total_periodo if periodo else None,
        "Status": p.status,
    }


def _campos_periodo(svc: LedgerService, pe) -> Dict[str, Any]:
    cliente = svc.get_cliente(pe.cliente_id)
    return {
        "ID": pe.id,
        "Cliente": cliente.nome if cliente else pe.cliente_id,
        "Período": pe.nome_periodo,
        "Status": pe.status,
        "Total": pe.total_periodo,
        "Produções": len(svc.producoes_do_periodo(pe.id)),
    }


# -----------------------
# comandos de infra
# -----------------------

@app.command("migrate")
def cmd_migrate(db_path: str = DB_OPTION):
    """Aplica migrações e recria as views auxiliares."""
    _preparar(db_path)
    typer.echo(f">> Migrações aplicadas e views criadas em: {db_path}")


@app.command("painel")
def cmd_painel(db_path: str = DB_OPTION):
    """Indicadores do dia e dos períodos abertos."""
    dados = _service(db_path).painel()
    _display_registro(
        {
            "Período atual": dados["periodo_atual"],
            "Clientes ativos": dados["clientes_ativos"],
            "Produções hoje": dados["producoes_hoje"],
            "Valor hoje": dados["valor_hoje"],
            "Períodos abertos": dados["periodos_abertos"],
            "Total em aberto": dados["total_periodos_abertos"],
        },
        title="Painel",
    )
    _display_table(
        [{"tipo": r["tipo"], "total": r["total"], "percentual": f"{r['percentual']}%"} for r in dados["por_tipo"]],
        title="Participação por Tipo",
    )


# -----------------------
# clientes
# -----------------------

cliente_app = typer.Typer(help="Cadastro de clientes.")
app.add_typer(cliente_app, name="cliente")


@cliente_app.command("add")
def cmd_cliente_add(nome: str = typer.Argument(...), papel: str = PAPEL_OPTION, db_path: str = DB_OPTION):
    """Cadastra um cliente."""
    res = _checar(_service(db_path).adicionar_cliente(nome, papel=papel))
    typer.echo(f">> Cliente cadastrado: {res.registro.nome} ({res.registro.id})")


@cliente_app.command("list")
def cmd_cliente_list(
    todos: bool = typer.Option(False, "--todos", help="Inclui clientes inativos"),
    db_path: str = DB_OPTION,
):
    """Lista clientes (ativos, por padrão)."""
    svc = _service(db_path)
    clientes = svc.estado.clientes if todos else svc.clientes_ativos()
    _display_table(
        [{"id": c.id, "nome": c.nome, "ativo": "sim" if c.ativo else "não"} for c in clientes],
        title="Clientes",
    )


@cliente_app.command("edit")
def cmd_cliente_edit(
    cliente_id: str = typer.Argument(...),
    nome: Optional[str] = typer.Option(None, help="Novo nome"),
    ativo: Optional[bool] = typer.Option(None, "--ativo/--inativo"),
    papel: str = PAPEL_OPTION,
    db_path: str = DB_OPTION,
):
    """Renomeia, ativa ou desativa um cliente."""
    svc = _service(db_path)
    atual = svc.get_cliente(cliente_id)
    if atual is None:
        _falhar(["Cliente não encontrado"])
    res = _checar(svc.atualizar_cliente(
        cliente_id, nome if nome is not None else atual.nome,
        ativo if ativo is not None else atual.ativo, papel=papel,
    ))
    typer.echo(f">> Cliente atualizado: {res.registro.nome}")


@cliente_app.command("rm")
def cmd_cliente_rm(cliente_id: str = typer.Argument(...), papel: str = PAPEL_OPTION, db_path: str = DB_OPTION):
    """Exclui um cliente sem produções."""
    _checar(_service(db_path).excluir_cliente(cliente_id, papel=papel))
    typer.echo(">> Cliente excluído.")


# -----------------------
# projetos
# -----------------------

projeto_app = typer.Typer(help="Cadastro de projetos (por cliente).")
app.add_typer(projeto_app, name="projeto")


@projeto_app.command("add")
def cmd_projeto_add(
    nome: str = typer.Argument(...),
    cliente_id: str = typer.Option(..., "--cliente", help="ID do cliente"),
    papel: str = PAPEL_OPTION,
    db_path: str = DB_OPTION,
):
    """Cadastra um projeto para um cliente."""
    res = _checar(_service(db_path).adicionar_projeto(nome, cliente_id, papel=papel))
    typer.echo(f">> Projeto cadastrado: {res.registro.nome} ({res.registro.id})")


@projeto_app.command("list")
def cmd_projeto_list(
    cliente_id: str = typer.Option(..., "--cliente", help="ID do cliente"),
    db_path: str = DB_OPTION,
):
    """Lista os projetos ativos de um cliente."""
    projetos = _service(db_path).projetos_do_cliente(cliente_id)
    _display_table([{"id": p.id, "nome": p.nome} for p in projetos], title="Projetos")


@projeto_app.command("edit")
def cmd_projeto_edit(
    projeto_id: str = typer.Argument(...),
    nome: Optional[str] = typer.Option(None, help="Novo nome"),
    ativo: Optional[bool] = typer.Option(None, "--ativo/--inativo"),
    papel: str = PAPEL_OPTION,
    db_path: str = DB_OPTION,
):
    """Renomeia, ativa ou desativa um projeto."""
    svc = _service(db_path)
    atual = svc.get_projeto(projeto_id)
    if atual is None:
        _falhar(["Projeto não encontrado"])
    res = _checar(svc.atualizar_projeto(
        projeto_id, nome if nome is not None else atual.nome,
        ativo if ativo is not None else atual.ativo, papel=papel,
    ))
    typer.echo(f">> Projeto atualizado: {res.registro.nome}")


@projeto_app.command("rm")
def cmd_projeto_rm(projeto_id: str = typer.Argument(...), papel: str = PAPEL_OPTION, db_path: str = DB_OPTION):
    """Exclui um projeto sem produções."""
    _checar(_service(db_path).excluir_projeto(projeto_id, papel=papel))
    typer.echo(">> Projeto excluído.")


# -----------------------
# tipos de produção
# -----------------------

tipo_app = typer.Typer(help="Tipos de produção.")
app.add_typer(tipo_app, name="tipo")


@tipo_app.command("add")
def cmd_tipo_add(nome: str = typer.Argument(...), papel: str = PAPEL_OPTION, db_path: str = DB_OPTION):
    """Cadastra um tipo de produção."""
    res = _checar(_service(db_path).adicionar_tipo(nome, papel=papel))
    typer.echo(f">> Tipo cadastrado: {res.registro.nome}")


@tipo_app.command("list")
def cmd_tipo_list(
    todos: bool = typer.Option(False, "--todos", help="Inclui tipos inativos"),
    db_path: str = DB_OPTION,
):
    """Lista os tipos de produção na ordem de exibição."""
    svc = _service(db_path)
    tipos = svc.estado.tipos if todos else svc.tipos_ativos()
    _display_table(
        [{"id": t.id, "nome": t.nome, "ativo": "sim" if t.ativo else "não"} for t in tipos],
        title="Tipos de Produção",
    )


@tipo_app.command("edit")
def cmd_tipo_edit(
    tipo_id: str = typer.Argument(...),
    nome: Optional[str] = typer.Option(None, help="Novo nome"),
    ativo: Optional[bool] = typer.Option(None, "--ativo/--inativo"),
    papel: str = PAPEL_OPTION,
    db_path: str = DB_OPTION,
):
    """Renomeia, ativa ou desativa um tipo."""
    svc = _service(db_path)
    atual = next((t for t in svc.estado.tipos if t.id == tipo_id), None)
    if atual is None:
        _falhar(["Tipo de produção não encontrado"])
    res = _checar(svc.atualizar_tipo(
        tipo_id, nome if nome is not None else atual.nome,
        ativo if ativo is not None else atual.ativo, papel=papel,
    ))
    typer.echo(f">> Tipo atualizado: {res.registro.nome}")


@tipo_app.command("rm")
def cmd_tipo_rm(tipo_id: str = typer.Argument(...), papel: str = PAPEL_OPTION, db_path: str = DB_OPTION):
    """Exclui um tipo sem produções."""
    _checar(_service(db_path).excluir_tipo(tipo_id, papel=papel))
    typer.echo(">> Tipo excluído.")


# -----------------------
# produções
# -----------------------

producao_app = typer.Typer(help="Lançamentos de produção.")
app.add_typer(producao_app, name="producao")


@producao_app.command("add")
def cmd_producao_add(
    cliente_id: str = typer.Option(..., "--cliente", help="ID do cliente"),
    tipo: str = typer.Option(..., help="Tipo de produção (ex.: Feed)"),
    nome: str = typer.Option(..., help="Nome da produção"),
    quantidade: str = typer.Option(..., help="Quantidade (inteiro >= 1)"),
    valor: str = typer.Option(..., help="Valor unitário (ex.: 150,00)"),
    data: Optional[str] = typer.Option(None, help="DD/MM/AAAA ou AAAA-MM-DD (padrão: hoje)"),
    projeto_id: str = typer.Option("", "--projeto", help="ID do projeto (opcional)"),
    observacoes: str = typer.Option("", "--obs", help="Observações"),
    papel: str = PAPEL_OPTION,
    db_path: str = DB_OPTION,
):
    """Registra uma produção no período correspondente à data."""
    svc = _service(db_path)
    form = ProducaoForm(
        data=data or svc.hoje().isoformat(),
        cliente_id=cliente_id,
        tipo=tipo,
        nome_producao=nome,
        quantidade=quantidade,
        valor_unitario=valor,
        projeto_id=projeto_id,
        observacoes=observacoes,
    )
    res = _checar(svc.criar_producao(form, papel=papel))
    _display_registro(_campos_producao(svc, res.producao), title="Produção Registrada")


@producao_app.command("edit")
def cmd_producao_edit(
    producao_id: str = typer.Argument(...),
    tipo: Optional[str] = typer.Option(None),
    nome: Optional[str] = typer.Option(None),
    quantidade: Optional[str] = typer.Option(None),
    valor: Optional[str] = typer.Option(None),
    data: Optional[str] = typer.Option(None),
    projeto_id: Optional[str] = typer.Option(None, "--projeto"),
    observacoes: Optional[str] = typer.Option(None, "--obs"),
    papel: str = PAPEL_OPTION,
    db_path: str = DB_OPTION,
):
    """Edita uma produção (somente no dia da criação e com período aberto)."""
    svc = _service(db_path)
    atual = svc.get_producao(producao_id)
    if atual is None:
        _falhar(["Produção não encontrada"])

    alteracoes = {
        "tipo": tipo,
        "nome_producao": nome,
        "quantidade": quantidade,
        "valor_unitario": valor,
        "data": data,
        "projeto_id": projeto_id,
        "observacoes": observacoes,
    }
    form = dataclasses.replace(
        ProducaoForm.from_producao(atual),
        **{k: v for k, v in alteracoes.items() if v is not None},
    )
    res = _checar(svc.atualizar_producao(producao_id, form, papel=papel))
    _display_registro(_campos_producao(svc, res.producao), title="Produção Atualizada")


@producao_app.command("rm")
def cmd_producao_rm(producao_id: str = typer.Argument(...), papel: str = PAPEL_OPTION, db_path: str = DB_OPTION):
    """Exclui uma produção (somente no dia da criação e com período aberto)."""
    svc = _service(db_path)
    res = _checar(svc.excluir_producao(producao_id, papel=papel))
    periodo = svc.get_periodo(res.producao.periodo_id)
    typer.echo(f">> Produção excluída. Total do período: {brl(periodo.total_periodo)}")


@producao_app.command("dup")
def cmd_producao_dup(producao_id: str = typer.Argument(...), papel: str = PAPEL_OPTION, db_path: str = DB_OPTION):
    """Duplica uma produção com a data de hoje."""
    svc = _service(db_path)
    res = _checar(svc.duplicar_producao(producao_id, papel=papel))
    _display_registro(_campos_producao(svc, res.producao), title="Produção Duplicada")


@producao_app.command("list")
def cmd_producao_list(
    cliente_id: Optional[str] = typer.Option(None, "--cliente", help="ID do cliente"),
    projeto_id: Optional[str] = typer.Option(None, "--projeto", help="ID do projeto"),
    tipo: Optional[str] = typer.Option(None, "--tipo", help="Tipo de produção"),
    periodo_id: Optional[str] = typer.Option(None, "--periodo", help="ID do período"),
    status: Optional[str] = typer.Option(None, "--status", help="Aberto | Fechado"),
    db_path: str = DB_OPTION,
):
    """Lista produções (com nomes de cliente e projeto) e o total filtrado."""
    _preparar(db_path)
    filtros = FiltroProducoes(
        cliente_id=cliente_id, projeto_id=projeto_id, tipo=tipo, periodo_id=periodo_id, status=status
    )
    rows = listar_producoes_detalhe(filtros, db_path=db_path)
    _display_table(
        [
            {
                "id": r["id"],
                "data": _data_br(r["data"]),
                "cliente": r["cliente_nome"],
                "projeto": r["projeto_nome"],
                "tipo": r["tipo"],
                "nome": r["nome_producao"],
                "quantidade": r["quantidade"],
                "valor": Decimal(r["valor_unitario"]),
                "total": Decimal(r["total"]),
                "status": r["status"],
            }
            for r in rows
        ],
        title="Produções",
    )
    total = sum((Decimal(r["total"]) for r in rows), Decimal("0.00"))
    typer.echo(f">> {len(rows)} produção(ões). Total filtrado: {brl(total)}")


@producao_app.command("pode-editar")
def cmd_producao_pode_editar(producao_id: str = typer.Argument(...), db_path: str = DB_OPTION):
    """Informa se a produção ainda pode ser editada hoje."""
    svc = _service(db_path)
    p = svc.get_producao(producao_id)
    if p is None:
        _falhar(["Produção não encontrada"])
    typer.echo("sim" if svc.pode_editar_producao(p) else "não")


# -----------------------
# períodos
# -----------------------

periodo_app = typer.Typer(help="Períodos de faturamento (21 a 20).")
app.add_typer(periodo_app, name="periodo")


@periodo_app.command("list")
def cmd_periodo_list(
    cliente_id: str = typer.Option(..., "--cliente", help="ID do cliente"),
    abertos: bool = typer.Option(False, "--abertos", help="Somente períodos abertos"),
    db_path: str = DB_OPTION,
):
    """Lista os períodos de um cliente (mais recente primeiro)."""
    svc = _service(db_path)
    periodos = svc.periodos_abertos_do_cliente(cliente_id) if abertos else svc.periodos_do_cliente(cliente_id)
    _display_table(
        [
            {
                "id": pe.id,
                "periodo": pe.nome_periodo,
                "status": pe.status,
                "total": pe.total_periodo,
                "itens": len(svc.producoes_do_periodo(pe.id)),
            }
            for pe in periodos
        ],
        title="Períodos",
    )


@periodo_app.command("show")
def cmd_periodo_show(periodo_id: str = typer.Argument(...), db_path: str = DB_OPTION):
    """Mostra os dados de um período."""
    svc = _service(db_path)
    pe = svc.get_periodo(periodo_id)
    if pe is None:
        _falhar(["Período não encontrado"])
    _display_registro(_campos_periodo(svc, pe), title="Período")


@periodo_app.command("fechar")
def cmd_periodo_fechar(periodo_id: str = typer.Argument(...), papel: str = PAPEL_OPTION, db_path: str = DB_OPTION):
    """Fecha o período e todas as suas produções."""
    svc = _service(db_path)
    res = _checar(svc.fechar_periodo(periodo_id, papel=papel))
    typer.echo(f">> Período fechado: {res.periodo.nome_periodo} ({brl(res.periodo.total_periodo)})")


@periodo_app.command("reabrir")
def cmd_periodo_reabrir(periodo_id: str = typer.Argument(...), papel: str = PAPEL_OPTION, db_path: str = DB_OPTION):
    """Reabre o período e todas as suas produções."""
    res = _checar(_service(db_path).reabrir_periodo(periodo_id, papel=papel))
    typer.echo(f">> Período reaberto: {res.periodo.nome_periodo}")


@periodo_app.command("recalcular")
def cmd_periodo_recalcular(periodo_id: str = typer.Argument(...), papel: str = PAPEL_OPTION, db_path: str = DB_OPTION):
    """Recalcula o total do período a partir das produções."""
    res = _checar(_service(db_path).recalcular_total(periodo_id, papel=papel))
    typer.echo(f">> Total recalculado: {brl(res.periodo.total_periodo)}")


@periodo_app.command("resumo")
def cmd_periodo_resumo(periodo_id: str = typer.Argument(...), db_path: str = DB_OPTION):
    """Resumo por tipo de produção."""
    _preparar(db_path)
    try:
        res = resumo_periodo(periodo_id, db_path=db_path)
    except ErroLedger as e:
        _falhar(e.mensagens)
    console.print(f"[bold]{res['periodo']}[/] — {res['status']} — {brl(res['total_periodo'])}")
    _display_table(res["por_tipo"], title="Resumo por Tipo")


@periodo_app.command("exportar")
def cmd_periodo_exportar(
    periodo_id: str = typer.Argument(...),
    path: str = typer.Argument(..., help="Arquivo XLSX de saída"),
    db_path: str = DB_OPTION,
):
    """Exporta o período para XLSX (abas Produções e Resumo)."""
    svc = _service(db_path)
    try:
        exportar_periodo_xlsx(svc.estado, periodo_id, path)
    except ErroLedger as e:
        _falhar(e.mensagens)
    typer.echo(f">> Planilha gerada: {path}")


@periodo_app.command("conferencia")
def cmd_periodo_conferencia(db_path: str = DB_OPTION):
    """Confere o total gravado de cada período com a soma das produções."""
    _preparar(db_path)
    divergentes = conferencia_totais(db_path=db_path)
    if not divergentes:
        typer.echo(">> Todos os totais conferem.")
        return
    _display_table(divergentes, title="Períodos com Total Divergente")
    raise typer.Exit(code=1)


# Entry point opcional:
def main():
    app()


if __name__ == "__main__":
    main()
