"""
Persistence backends: row storage plus email/password auth.

Modules
-------
base          : PersistenceClient / AuthClient ABCs, Order, Row.
sqlite_client : SqliteClient: local SQLite file, bcrypt password hashes.
rest_client   : RestClient: hosted PostgREST + GoTrue service over httpx.
factory       : build_client(config): picks the backend by backend.kind.
"""
