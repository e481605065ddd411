# backend/wsgi.py
from tenantpos import create_app

app = create_app()
