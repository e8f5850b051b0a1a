"""
Waitress WSGI entry point for production deployment.

Usage::

    DATABASE_URL=postgresql://... SECRET_KEY=... python wsgi.py

Waitress is a pure-Python WSGI server, so the API runs the same way
on Linux and Windows hosts.
"""

import os

from waitress import serve

from app import create_app

# Force production config when running via this entry point.
app = create_app(os.environ.get("FLASK_ENV", "production"))

if __name__ == "__main__":
    host = os.environ.get("WAITRESS_HOST", "127.0.0.1")
    port = int(os.environ.get("WAITRESS_PORT", "3000"))
    print(f"Starting Employee Management API on {host}:{port}")
    serve(app, host=host, port=port)
