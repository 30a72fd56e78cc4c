from form_engine.cli import app

app()
