from .session import BrowserSession, build_launch_candidates

__all__ = [
    "BrowserSession",
    "build_launch_candidates",
]
