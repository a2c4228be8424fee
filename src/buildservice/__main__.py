from buildservice.cli import app

app()
