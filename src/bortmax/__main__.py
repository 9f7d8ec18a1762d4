from bortmax.interfaces.cli.cli import start

raise SystemExit(start())
