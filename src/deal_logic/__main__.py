"""Allow ``python -m deal_logic``."""

from deal_logic.cli import main

main()
