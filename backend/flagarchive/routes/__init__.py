# Routes package init
"""
FlagArchive Backend: API Routes Package
=======================================

Route Inventory:
    - entities.py:  POST   /entities            (create)
                    GET    /entities            (paginated list)
                    GET    /entities/{id}       (read one)
                    PATCH  /entities/{id}       (partial update)
                    DELETE /entities/{id}       (delete)
    - users.py:     GET    /users               (paginated list)
                    GET    /users/{id}          (read one)
    - health.py:    GET    /health              (service health check)

Design Principle:
    Routes are THIN. They decode the request, call one service method, and
    set headers. Business rules live in services; status codes for error
    kinds live in main.py.
"""
