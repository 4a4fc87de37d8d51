"""
Tessera CLI Entry Point
=======================

Allows running tessera as a module: python -m tessera
"""

from tessera.cli.main import main

if __name__ == "__main__":
    main()
