"""User CRUD API.

This package contains the REST API exposing CRUD operations over users and
their email addresses, together with the infrastructure it runs on: database
setup, configuration, logging and the optional cache, broker and object
storage integrations.
"""

__version__ = "1.0.0"
