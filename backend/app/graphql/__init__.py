"""
GraphQL API layer.

    schema.py       assembles the Strawberry schema
    queries.py      Query root resolvers
    mutations.py    Mutation root resolvers
    types.py        output object types and enums
    inputs.py       input object types
    context.py      per-request context and identity resolution
    rules.py        rule/ruleset machinery (field extensions)
    permissions.py  the deployed rule table
    extensions.py   operation logging and error masking
"""
