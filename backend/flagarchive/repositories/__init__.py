# Repositories package init
"""
FlagArchive Backend: Storage Gateway Layer
==========================================

What:  The only code that issues SQL.
Why:   Services stay independent of the store; tests swap in mocks.

Inventory:
    - base.py:               EntityRepository / UserRepository contracts,
                             StorageError, DuplicateKeyError
    - sql.py:                Shared execution, retry and error wrapping
    - entity_repository.py:  SQLEntityRepository
    - user_repository.py:    SQLUserRepository
"""
