"""
Domain stores: in-memory caches of backend rows with async actions.

Modules
-------
base                 : AsyncStatus + BaseStore (status / error lifecycle).
auth_store           : AuthStore: user, session, profile.
product_store        : ProductStore: tracked products.
recommendation_store : RecommendationStore: verdicts and insights.
"""
