"""WSGI entry point for the stub chat server."""

import os

from stub_server import create_app

app = create_app(os.getenv("FLASK_ENV", "production"))

if __name__ == "__main__":
    app.run(host="127.0.0.1", port=int(os.getenv("STUB_PORT", "5050")))
