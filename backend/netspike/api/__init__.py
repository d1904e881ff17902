"""
API Module

FastAPI application exposing game sessions over HTTP.
"""
