from buddy.core.auth.dependencies import get_actor_id

__all__ = ["get_actor_id"]
