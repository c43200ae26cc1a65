"""
FastAPI Task Backend package.

The application instance lives in src.api.main (``app``); use
``src.api.main.create_app`` to build isolated instances.
"""
