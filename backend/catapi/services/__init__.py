# Services package init
"""
CatAPI Backend — Services Layer
=================================

What:  Business logic between routes (HTTP) and repositories (SQL).
How:   Services are stateless singletons. Each call receives the request's
       AsyncSession and, where it matters, the Principal as arguments.

Service Inventory:
    - authorization:     authorize()/require() capability checks
    - CatService:        cat resource controller
    - UserService:       user resource controller
    - AuthService:       login and token issuing
    - FileService:       upload validation, storage and cleanup
    - GeocodingService:  address → coordinates lookup
"""
