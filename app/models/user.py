# app/models/user.py
import uuid

from sqlmodel import SQLModel, Field


class UserProfile(SQLModel):
    """
    Role record in the Supabase `users` table.

    Identity:
      - id: MUST match Supabase auth.users.id

    Role:
      - "super_admin" | company roles (e.g. "company_admin")

    Rows are created and promoted out-of-band; this app only reads them.
    """

    id: uuid.UUID = Field(description="Matches Supabase auth.users.id")

    role: str = Field(description="Application role")
