"""
Python client for the task API: HTTP service, request cache and form state.
"""
