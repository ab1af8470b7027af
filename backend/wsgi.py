# backend/wsgi.py
from zlagoda import create_app

app = create_app()
