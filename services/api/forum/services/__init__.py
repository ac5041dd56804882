"""Business logic services.

Services handle:
- Persona registry: create, list, soft-delete, resolve by name
- Post feed: create, list (new/hot), detail with comments, cascade delete
- Comment thread: create with same-post reply checks
- Validation and soft-delete visibility rules shared by the above
"""
