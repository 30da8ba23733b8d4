from models.offering import CourseDuration, Offering

__all__ = [
    "CourseDuration",
    "Offering",
]
