"""Core domain package for tripcards.

Core contains link extraction, classification and preview resolution without
any HTTP-library or message-source specific code, keeping the business logic
portable.
"""
