"""Release notes and GitHub release publishing."""

from shipit.release.changelog import ChangelogSection, assemble, extract_section
from shipit.release.github import publish_release, repository_coordinates

__all__ = [
    "ChangelogSection",
    "assemble",
    "extract_section",
    "publish_release",
    "repository_coordinates",
]
