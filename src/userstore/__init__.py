"""
user-store: persistence adapter for the User entity.

    from userstore.repositories import UserRepository
"""
