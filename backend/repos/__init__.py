"""Repositories for Pagesmith storage."""

from backend.repos.site_repo import SiteRepo, site_repo

__all__ = ["SiteRepo", "site_repo"]
