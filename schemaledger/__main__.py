"""Allow ``python -m schemaledger``."""

from schemaledger.cli import run

if __name__ == '__main__':
    run()
