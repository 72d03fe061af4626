"""
HTTP API package: FastAPI surface over the credit pipeline.
"""
