"""API blueprints for the activity stats service"""

from gh_activity.api.github import github_bp

__all__ = ['github_bp']
