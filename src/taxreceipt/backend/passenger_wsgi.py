"""WSGI entrypoint for serving the tax receipt API behind Passenger."""

from taxreceipt.backend.app import create_app

# Passenger looks for a module-level ``application`` callable.
application = create_app()
