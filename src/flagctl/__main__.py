from flagctl.cli.main import app

app(prog_name="flagctl")
