from orghub.core.features.auth.dependencies import get_authorization, get_current_user, get_org_id


__all__ = ["get_authorization", "get_current_user", "get_org_id"]
