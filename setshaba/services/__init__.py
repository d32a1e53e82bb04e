"""
Services layer - business logic for users, reports, upvotes and the
municipality directory.

Services receive their collaborators (store, identity provider, municipality
resolver) explicitly; routes obtain them through FastAPI dependencies.
"""
