#!/usr/bin/env python3
"""
WSGI entry point for production deployment
"""
print("🔧 WSGI: Loading Postman to Insomnia conversion service", flush=True)

from service.main import app

app.config['DEBUG'] = False

# WSGI application
application = app
