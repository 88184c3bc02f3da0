"""Run appmem as ``python -m appmem``."""

from appmem.cli import main

if __name__ == "__main__":
    main()
