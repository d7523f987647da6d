from focusdesk.cli.main import app

app()
