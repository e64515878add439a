"""Package likes entity."""

from dataclasses import dataclass


@dataclass(frozen=True)
class PackageLikes:
    """Aggregate like count for one package, seen by one (optional) caller."""

    package_name: str
    total_likes: int
    user_has_liked: bool = False

    def __post_init__(self):
        """Validate likes data."""
        if not self.package_name or not self.package_name.strip():
            raise ValueError("Package name cannot be empty")
        if self.total_likes < 0:
            raise ValueError("Total likes cannot be negative")

    def to_dict(self) -> dict:
        """
        Convert to the response shape returned to clients.

        Returns:
            Dictionary with totalLikes and userHasLiked
        """
        return {"totalLikes": self.total_likes, "userHasLiked": self.user_has_liked}
