from devsetup.main import cli

cli()
