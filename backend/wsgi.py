# Entry point for `flask --app wsgi run` and WSGI servers.
from catcoin import create_app

app = create_app()
