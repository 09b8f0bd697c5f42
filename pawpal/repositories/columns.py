"""Fixed projections for the users and dogs tables."""

USER_FIELDS = (
    "id", "name", "email", "role", "phone", "location",
    "profile_image_url", "bio", "rating", "total_reviews",
    "created_at", "updated_at", "is_active",
)

DOG_FIELDS = (
    "id", "owner_id", "name", "breed", "age", "size", "temperament",
    "special_needs", "medical_notes", "profile_image_url",
    "is_friendly_with_other_dogs", "is_friendly_with_children",
    "energy_level", "created_at", "updated_at", "is_active",
)

USER_COLUMNS = ", ".join(USER_FIELDS)
DOG_COLUMNS = ", ".join(DOG_FIELDS)

SELECT_LIVE_USERS = f"SELECT {USER_COLUMNS} FROM users WHERE is_active = TRUE"
SELECT_LIVE_DOGS = f"SELECT {DOG_COLUMNS} FROM dogs WHERE is_active = TRUE"

# Newest first; id breaks ties between rows created in the same instant
NEWEST_FIRST = "created_at DESC, id DESC"
