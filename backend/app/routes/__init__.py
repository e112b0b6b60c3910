"""
Chirp Backend — REST Routes Package
====================================

Route Inventory:
    - health.py:  GET /health   (service health check)

The API itself is GraphQL and is mounted by app.main through
strawberry's GraphQLRouter; see app.graphql.
"""
