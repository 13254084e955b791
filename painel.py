#!/usr/bin/env python3
"""
Atalho para abrir o painel da loja (TUI) com os dados de demonstração.

Para usar o banco: python app.py tui --db moveis.db
"""

import sys

from moveis.adapters.painel_tui import main

if __name__ == "__main__":
    print("🛋️ Iniciando Loja de Móveis - Painel...")
    try:
        main()
    except KeyboardInterrupt:
        print("\n👋 Saindo do painel...")
        sys.exit(0)
