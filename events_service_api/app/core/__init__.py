"""
Core building blocks shared by services and routes: configuration,
logging, the document store, payload validation and session security.
"""
