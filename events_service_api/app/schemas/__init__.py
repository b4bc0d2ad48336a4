"""
Pydantic schema definitions for API responses.

Request bodies are checked by the declarative validator in
``core.validation``; these models describe what the API returns and
feed the generated OpenAPI document.
"""
