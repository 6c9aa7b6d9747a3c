"""
Core building blocks for the menu lens backend: exceptions, error handlers,
logging, token verification, request validation and dependency providers.
"""
