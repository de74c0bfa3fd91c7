"""
Unit tests for the provisioning retry layer.

Test individual components in isolation:
- Error models and the error shape adapter
- Text-pattern matchers and status-code classifiers
- Pipelines and the pipeline registry
- Retry engine (backoff, delay hints, exhaustion)
- Settings and logging configuration
"""
