"""
Service layer.

Each service owns the field schemas for its resource, validates
incoming payloads with ``core.validation`` and talks to the document
store.  API handlers only translate service outcomes into HTTP
responses.
"""
