from .user_mapper import to_domain, to_record, patch_from_user

__all__ = ["to_domain", "to_record", "patch_from_user"]
