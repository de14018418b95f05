# app.py
"""
Entrypoint da aplicação.

Uso:
  python app.py migrate --db producoes.db
  python app.py cliente add "Padaria Central"
  python app.py producao add --cliente <id> --tipo Feed --nome "Post promo" --quantidade 3 --valor 150,00
  python app.py periodo fechar <periodo_id>
  python app.py periodo exportar <periodo_id> periodo.xlsx
"""

from producoes.adapters.cli import main

if __name__ == "__main__":
    main()
