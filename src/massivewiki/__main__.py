from massivewiki.cli import app

app()
