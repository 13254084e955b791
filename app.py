# app.py
"""
Entrypoint da aplicação.

Uso:
  python app.py migrate --db moveis.db
  python app.py seed
  python app.py produtos --status Disponível
  python app.py vender p-1 -u LUIZA --preco "1.500,00"
  python app.py entrega pendentes
  python app.py rel ranking
"""

from moveis.adapters.cli import main

if __name__ == "__main__":
    main()
