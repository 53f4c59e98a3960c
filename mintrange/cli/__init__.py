"""mintrange.cli — command line tools (`python -m mintrange.cli.plan_mint`)."""
