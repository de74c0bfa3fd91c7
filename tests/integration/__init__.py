"""
Integration tests for the provisioning retry layer.

Exercise adapter, pipelines and retry engine together over real httpx
clients backed by MockTransport (no network access required).
"""
