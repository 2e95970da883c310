"""HybridRec: hybrid product recommendation service.

This package turns a user's interaction history (views, likes, cart adds and
purchases) into a ranked list of product suggestions.

Modules:
    api: FastAPI application and REST API endpoints
    recommender: recommendation strategies and data access
    config: environment-driven settings
"""

__version__ = "0.1.0"
