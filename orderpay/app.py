# module orderpay.app
"""
Instance FastAPI unique de l'application, construite par la factory.
Importée par orderpay.asgi et par les tests.
"""

from orderpay.app_setup.factory import create_app

app = create_app()
