# app.py
"""
Entrypoint da aplicação.

Uso:
  python app.py migrate --db orcamentos.db
  python app.py seed
  python app.py login admin@metalapex.com.br --senha 123
  python app.py orcamento criar --cliente 1 --servico 1 --largura 2 --altura 1.5
  python app.py orcamento pdf MA-2025-0001
  python app.py tui
"""

from orcamentos.adapters.cli import main

if __name__ == "__main__":
    main()
