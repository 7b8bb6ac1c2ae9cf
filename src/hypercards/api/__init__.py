"""HyperCards — generation service HTTP layer.

Modules
-------
client
    ``httpx``-based async client for the submit, status, resource and asset
    endpoints, mapping failures onto the package's error taxonomy.
models
    Pydantic models for the service's request and response bodies.
"""
