# Services package init
"""
FlagArchive Backend: Services Layer
===================================

What:  Business logic layer sitting between routes (HTTP) and repositories
       (persistence).
Why:   Routes handle HTTP, services handle rules, repositories handle SQL.

Service Inventory:
    - validator.py:       Pure field checks on create/update requests
    - mapper.py:          Pure record <-> schema transforms
    - entity_service.py:  EntityService, the entity CRUD orchestrator
    - user_service.py:    UserService, read-only user access

Why validator and mapper are plain functions:
    They hold no state and touch no I/O, so they are tested directly without
    any fixtures, and the services cannot accidentally depend on their order
    of construction.
"""
