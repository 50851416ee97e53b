from .id import DEV_RUN_ID, get_base64, new_run_id, now_ms

__all__ = ["DEV_RUN_ID", "get_base64", "new_run_id", "now_ms"]
