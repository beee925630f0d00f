from .replay_labs_fetcher import DEFAULT_BASE_URL, ReplayLabsFetcher

__all__ = ["DEFAULT_BASE_URL", "ReplayLabsFetcher"]
