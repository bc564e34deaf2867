# src/snapsource/__main__.py
from snapsource.cli import main

main()
