"""
CatAPI Backend — Storage Access Layer
======================================

What:  Every SQL statement the application runs lives in a repository.
How:   A repository wraps the request's AsyncSession; services create one per
       call (`CatRepository(db)`) and never build queries themselves.

Repositories:
    - UserRepository: users table
    - CatRepository:  cats table, returning CatView (cat + owner) for reads
"""
