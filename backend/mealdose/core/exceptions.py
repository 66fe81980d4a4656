class InvalidDoseInputError(ValueError):
    """Request data that cannot produce a meaningful dose (e.g. negative carbs)."""


class ProfileNotFoundError(LookupError):
    def __init__(self, user_id: str):
        super().__init__(f"No medical profile stored for user '{user_id}'")
        self.user_id = user_id


__all__ = ["InvalidDoseInputError", "ProfileNotFoundError"]
