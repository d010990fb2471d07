# stockrecon/__main__.py

from stockrecon.cli import main

main()
